"""Reset (or create) the admin account password.

Usage: python scripts/reset_admin_password.py <username> <new-password>
"""

import os
import sys

import psycopg2
from dotenv import load_dotenv
from passlib.context import CryptContext

load_dotenv()

if len(sys.argv) != 3:
    print(__doc__)
    sys.exit(1)

username, password = sys.argv[1], sys.argv[2]
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
password_hash = pwd_context.hash(password, rounds=12)

# psycopg2 takes a plain libpq URL
conn = psycopg2.connect(os.environ["DATABASE_URL"].replace("+psycopg2", ""))
conn.autocommit = True
cur = conn.cursor()

cur.execute("SELECT id FROM users WHERE username = %s", (username,))
row = cur.fetchone()
if row:
    cur.execute(
        "UPDATE users SET password_hash = %s, is_active = true, updated_at = NOW() WHERE id = %s",
        (password_hash, row[0]),
    )
    print(f"Password reset for {username}")
else:
    cur.execute(
        """
        INSERT INTO users (name, username, password_hash, role, is_active, reminder_lead_days, created_at, updated_at)
        VALUES (%s, %s, %s, 'ADMIN', true, 1, NOW(), NOW())
        """,
        (username.title(), username, password_hash),
    )
    print(f"Created admin {username}")

cur.close()
conn.close()
