from __future__ import annotations

from app.core.config import get_settings
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.services.seed import seed_demo_data


def main() -> None:
    settings = get_settings()
    if settings.auto_create_schema:
        Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        inserted = seed_demo_data(db)
    if inserted:
        print(f"Seeded {inserted} demo invoices for account {settings.demo_account_id}.")
    else:
        print(f"Account {settings.demo_account_id} already has invoices; nothing seeded.")


if __name__ == "__main__":
    main()
