"""Create the submissions table. Run from project root: python3 scripts/create_tables.py"""
import sys
from pathlib import Path

_root = Path(__file__).resolve().parent.parent
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from app import create_app  # noqa: E402  (app.config loads .env on import)
from app.models import db  # noqa: E402

app = create_app()
with app.app_context():
    db.create_all()
    print("Tables created:", ", ".join(sorted(db.metadata.tables)))
