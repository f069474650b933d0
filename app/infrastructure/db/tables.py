from sqlalchemy import Boolean, Column, DateTime, Index, Integer, MetaData, Numeric, String, Table

metadata = MetaData()

catalog_items = Table(
    "catalog_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(255), nullable=False),
    Column("author", String(255), nullable=False),
    Column("isbn", String(17), nullable=False, unique=True),
    Column("price", Numeric(10, 2), nullable=False),
    Column("stock_quantity", Integer, nullable=False, default=0),
    Column("category", String(100), nullable=False),
    Column("description", String(1000)),
    Column("publisher", String(100)),
    Column("active", Boolean, nullable=False, default=True),
    Column("version", Integer, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

Index("idx_catalog_items_title", catalog_items.c.title)
Index("idx_catalog_items_category", catalog_items.c.category)
