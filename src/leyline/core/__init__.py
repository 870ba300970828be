"""Core primitives shared by every leyline layer.

Architecture::

    errors.py      LeylineError hierarchy + recovery suggestions
    logging.py     structlog configuration (stderr, console or JSON)
    hashing.py     sha256 content hashes and manifests
    platform.py    platform detection for suggestions and ``version -v``
    config/        LeylineSettings (pydantic-settings) + ``.leyline`` file
"""
