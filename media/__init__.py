"""
media — external storage for uploaded account images.

Backends accept a local file path, return a durable URL and always
remove the local temp file.  ``get_media_storage`` picks the backend
configured by ``MEDIA_BACKEND``.
"""
