"""
Tools Package

Service clients and utilities.

Service Clients (with connection pooling and graceful shutdown):
- fmcsa_client: FMCSA QCMobile carrier lookups

Utility Tools:
- time_tool: Date/time parsing and utilities

NOTE: Nothing is imported eagerly here; schemas depend on time_tool and the
client depends on schemas. Import modules directly:
`from freight_match.tools.fmcsa_client import FmcsaClient`
"""
