"""
Shared, cross-cutting code for the API.

`core/` holds the small building blocks every feature uses: the data store
client (protocol, Postgres and in-memory implementations), error types,
settings and logging. Feature-specific queries and business logic live in the
corresponding feature package (e.g. `reviews/`).
"""
