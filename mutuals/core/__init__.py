"""Cross-cutting building blocks shared by every layer.

- **config**: Typed settings loaded from the environment
- **constants**: Enumerations and fixed limits
- **context**: Request correlation and identity context
- **exceptions**: Exception hierarchy mapped to HTTP statuses
- **logging**: loguru setup with console and JSON sinks
- **redaction**: Masking of sensitive values before they are logged
"""
