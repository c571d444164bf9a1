"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist, and
upgrades tables written by older app versions.
Run this module directly to initialize a fresh database:
    python -m reminding.db.init_db
"""

from reminding.db.connection import Database
from reminding.utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 3

SCHEMA_SQL = """
-- Subscriptions: one row per tracked subscription
CREATE TABLE IF NOT EXISTS subscriptions (
    id              SERIAL PRIMARY KEY,
    unique_key      VARCHAR(36) UNIQUE NOT NULL,
    name            VARCHAR(200) NOT NULL,
    created_at      TIMESTAMP NOT NULL DEFAULT NOW(),
    start_date      DATE NOT NULL,
    billing_cycle   VARCHAR(20) NOT NULL CHECK (billing_cycle IN (
                        'oneTime', 'monthly', 'quarterly', 'semiAnnually',
                        'yearly', 'everyTwoYears', 'everyThreeYears')),
    anchor_day      INT CHECK (anchor_day BETWEEN 1 AND 31),
    anchor_month    INT CHECK (anchor_month BETWEEN 1 AND 12),
    reminder_days   INT,
    category        VARCHAR(50),
    rating          INT,
    price           DOUBLE PRECISION,
    custom_fields   TEXT
);

-- Single-row table holding the schema version
CREATE TABLE IF NOT EXISTS schema_version (
    id              INT PRIMARY KEY DEFAULT 1 CHECK (id = 1),
    version         INT NOT NULL
);

-- Indexes for faster queries
CREATE INDEX IF NOT EXISTS idx_subscriptions_category ON subscriptions(category);
CREATE INDEX IF NOT EXISTS idx_subscriptions_rating ON subscriptions(rating);
CREATE INDEX IF NOT EXISTS idx_subscriptions_price ON subscriptions(price);
CREATE INDEX IF NOT EXISTS idx_subscriptions_start_date ON subscriptions(start_date);
"""

# Older tables stored only the next renewal date. Renewals are now derived
# from the start date plus anchors, taken from the start date itself.
LEGACY_UPGRADE_SQL = """
ALTER TABLE subscriptions ADD COLUMN IF NOT EXISTS start_date DATE;
UPDATE subscriptions SET start_date = created_at::date WHERE start_date IS NULL;
ALTER TABLE subscriptions ALTER COLUMN start_date SET NOT NULL;

ALTER TABLE subscriptions ADD COLUMN IF NOT EXISTS anchor_day INT;
ALTER TABLE subscriptions ADD COLUMN IF NOT EXISTS anchor_month INT;
UPDATE subscriptions SET
    anchor_day = CASE
        WHEN billing_cycle <> 'oneTime' THEN EXTRACT(DAY FROM start_date)::INT
    END,
    anchor_month = CASE
        WHEN billing_cycle IN ('yearly', 'everyTwoYears', 'everyThreeYears')
        THEN EXTRACT(MONTH FROM start_date)::INT
    END
WHERE anchor_day IS NULL;

ALTER TABLE subscriptions DROP COLUMN renewal_date;
"""

_COLUMNS_SQL = """
    SELECT column_name FROM information_schema.columns
    WHERE table_name = 'subscriptions';
"""

_SET_VERSION_SQL = """
    INSERT INTO schema_version (id, version) VALUES (1, %s)
    ON CONFLICT (id) DO UPDATE SET version = EXCLUDED.version;
"""


def needs_legacy_upgrade(columns: set[str]) -> bool:
    """True for a subscriptions table still keyed on a stored renewal date."""
    return "renewal_date" in columns


def create_tables(db: Database) -> None:
    """
    Upgrade a legacy subscriptions table if present, then create any missing
    tables and indexes. Runs as one transaction; safe to call multiple times.
    """
    conn = db.get_connection()
    try:
        with conn.cursor() as cur:
            cur.execute(_COLUMNS_SQL)
            columns = {r[0] for r in cur.fetchall()}
            if needs_legacy_upgrade(columns):
                logger.info("Upgrading legacy subscriptions table to start date + anchors...")
                cur.execute(LEGACY_UPGRADE_SQL)
            cur.execute(SCHEMA_SQL)
            cur.execute(_SET_VERSION_SQL, (SCHEMA_VERSION,))
        conn.commit()
        logger.info(f"Database schema initialized (version {SCHEMA_VERSION}).")
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to initialize schema: {e}")
        raise
    finally:
        db.release_connection(conn)


if __name__ == "__main__":
    with Database() as database:
        create_tables(database)
    print("Database schema created successfully.")
