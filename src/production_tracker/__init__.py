"""Production Tracker package.

Organized by feature modules (users, production, offdays, analytics, ...)
around a local key/value store that mirrors itself to a spreadsheet endpoint.
A thin Flask layer exposes the services as JSON.
"""
