"""SlopCollector.

Schema introspection, ER diagram building and LLM optimization advice
for Supabase/PostgREST projects.

Example:
    from slopcollector import SchemaIntrospector, SupabaseRestClient

    client = SupabaseRestClient("https://xyz.supabase.co", api_key)
    snapshot = SchemaIntrospector(client).introspect()
    snapshot.tables
"""

__version__ = "0.1.0"

from slopcollector.core.models.base import Result
from slopcollector.introspection.client import SupabaseRestClient
from slopcollector.introspection.introspector import SchemaIntrospector

__all__ = [
    "Result",
    "SchemaIntrospector",
    "SupabaseRestClient",
    "__version__",
]
