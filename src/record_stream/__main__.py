"""Allow running record-stream with ``python -m record_stream``."""

from .cli import main

if __name__ == "__main__":
    main()
