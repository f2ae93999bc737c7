"""Building blocks of a federated GraphQL gateway: schema and document model, introspection, @skip/@include evaluation, result merging, query formatting and request instrumentation."""

__version__ = "0.1.0"
__all__ = ["ast", "execution", "formatting", "instrumentation"]