"""
Proporciona instancias compartidas de servicios y clientes que pueden ser inyectados en cualquier punto de la aplicación

Gestiona:
- Cliente Gemini

El cliente se crea la primera vez que se necesita, de modo que la aplicación
puede arrancar (y probarse) sin clave de API configurada.
"""

from functools import lru_cache

from stylestudio.config import GEMINI_API_KEY
from stylestudio.gemini import GeminiClient


@lru_cache(maxsize=1)
def get_gemini_client() -> GeminiClient:
    return GeminiClient(api_key=GEMINI_API_KEY)
