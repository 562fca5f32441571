import os

# Production unless the environment says otherwise
os.environ.setdefault("ENV", "production")

from tulipkids import create_app  # noqa: E402

app = create_app()
