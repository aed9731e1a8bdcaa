from sqlalchemy import text
from sqlalchemy.engine import Connection

STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS shops (
      id TEXT PRIMARY KEY,
      name TEXT NOT NULL,
      currency TEXT NOT NULL DEFAULT 'INR',
      upi_id TEXT,
      upi_qr_url TEXT,
      created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS items (
      id TEXT PRIMARY KEY,
      shop_id TEXT NOT NULL REFERENCES shops(id),
      name TEXT NOT NULL,
      base_price NUMERIC(12, 2) NOT NULL CHECK (base_price >= 0),
      stock_quantity INTEGER NOT NULL DEFAULT 0 CHECK (stock_quantity >= 0),
      min_stock_alert INTEGER NOT NULL DEFAULT 0,
      max_discount_percentage NUMERIC(5, 2) NOT NULL DEFAULT 0,
      max_discount_fixed NUMERIC(12, 2) NOT NULL DEFAULT 0,
      is_active BOOLEAN NOT NULL DEFAULT TRUE,
      created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
      updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS transactions (
      id TEXT PRIMARY KEY,
      shop_id TEXT NOT NULL REFERENCES shops(id),
      staff_id TEXT,
      entered_amount NUMERIC(12, 2) NOT NULL,
      inferred_item_id TEXT REFERENCES items(id),
      base_price NUMERIC(12, 2) NOT NULL,
      discount_amount NUMERIC(12, 2) NOT NULL,
      discount_percentage NUMERIC(5, 2) NOT NULL,
      payment_mode TEXT NOT NULL CHECK (payment_mode IN ('CASH', 'UPI', 'CREDIT')),
      cash_received NUMERIC(12, 2),
      change_amount NUMERIC(12, 2),
      is_discount_override BOOLEAN NOT NULL DEFAULT FALSE,
      is_credit_settled BOOLEAN NOT NULL DEFAULT TRUE,
      notes TEXT,
      created_at TIMESTAMP NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS inventory_movements (
      id TEXT PRIMARY KEY,
      shop_id TEXT NOT NULL REFERENCES shops(id),
      item_id TEXT NOT NULL REFERENCES items(id),
      transaction_id TEXT REFERENCES transactions(id),
      movement_type TEXT NOT NULL CHECK (movement_type IN ('SALE', 'RESTOCK')),
      quantity_change INTEGER NOT NULL,
      previous_quantity INTEGER NOT NULL,
      new_quantity INTEGER NOT NULL,
      notes TEXT,
      created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
)


def create_schema(conn: Connection) -> None:
    for statement in STATEMENTS:
        conn.execute(text(statement))
