from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date


PROVIDER_TYPES = ("Developer", "Publisher")


class Category(db.Model):
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column("category_id", db.Integer, primary_key=True)
    title = db.Column(db.String(120), nullable=False, unique=True)
    description = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {"id": self.id, "title": self.title, "description": self.description}


class Provider(db.Model):
    """Developer or publisher an app is sold on behalf of."""
    __tablename__ = "providers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column("provider_id", db.Integer, primary_key=True)
    name = db.Column("provider_name", db.String(200), nullable=False)
    provider_type = db.Column(db.String(32), nullable=False)
    description = db.Column(db.Text, nullable=True)
    country = db.Column(db.String(120), nullable=True)
    founded_date = db.Column(db.Date, nullable=True)
    web = db.Column(db.String(255), nullable=True)

    def summary_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.provider_type,
            "country": self.country or None,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.provider_type,
            "description": self.description or None,
            "country": self.country or None,
            "foundedDate": to_iso_date(self.founded_date),
            "web": self.web or None,
        }


class App(db.Model):
    """A catalog item. Price is what customers pay; cost_price is internal."""
    __tablename__ = "apps"
    __table_args__ = (
        db.Index("ix_apps_release_title", "release_date", "title"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column("app_id", db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    cost_price = db.Column(db.Numeric(10, 2), nullable=True)
    price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    release_date = db.Column(db.Date, nullable=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.category_id"), nullable=True, index=True)
    provider_id = db.Column(db.Integer, db.ForeignKey("providers.provider_id"), nullable=True, index=True)

    category = db.relationship("Category", lazy="joined")
    provider = db.relationship("Provider", lazy="joined")

    def __repr__(self) -> str:
        return f"<App id={self.id} title={self.title!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "price": float(self.price),
            "releaseDate": to_iso_date(self.release_date),
            "category": {"id": self.category.id, "title": self.category.title} if self.category else None,
            "provider": self.provider.summary_dict() if self.provider else None,
        }
