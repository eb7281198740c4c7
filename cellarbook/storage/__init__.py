"""Storage backends for wine records and the wine catalog.

``cellarbook.storage.factory.build_stores`` picks a backend from settings.
"""
