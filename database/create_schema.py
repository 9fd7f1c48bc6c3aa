import psycopg2
import os
import sys
from urllib.parse import urlparse

# Database connection details
DATABASE_URL = os.getenv("DATABASE_URL")
DB_NAME_FALLBACK = os.getenv("POSTGRES_DB", "gymtrack")
DB_USER_FALLBACK = os.getenv("POSTGRES_USER", "user")
DB_PASSWORD_FALLBACK = os.getenv("POSTGRES_PASSWORD", "password")
DB_HOST_FALLBACK = os.getenv("POSTGRES_HOST", "localhost")
DB_PORT_FALLBACK = os.getenv("POSTGRES_PORT", "5432")

FALLBACK_CONN_PARAMS = {
    'dbname': DB_NAME_FALLBACK,
    'user': DB_USER_FALLBACK,
    'password': DB_PASSWORD_FALLBACK,
    'host': DB_HOST_FALLBACK,
    'port': DB_PORT_FALLBACK
}

conn_params = FALLBACK_CONN_PARAMS
_db_connection_method = f"POSTGRES_* variables to host '{DB_HOST_FALLBACK}'"
if DATABASE_URL:
    try:
        url = urlparse(DATABASE_URL)
        conn_params = {
            'dbname': url.path[1:],
            'user': url.username,
            'password': url.password,
            'host': url.hostname,
            'port': url.port
        }
        _db_connection_method = f"DATABASE_URL to host '{url.hostname}'"
    except ValueError as e:
        print(f"Warning: Could not parse DATABASE_URL: {e}. Falling back to POSTGRES_* variables.")


# SQL commands to create tables and indexes
SQL_COMMANDS = """
-- Enable UUID generation
CREATE EXTENSION IF NOT EXISTS "pgcrypto";

-- Users Table (accounts are managed by the client application; rows here anchor ownership)
CREATE TABLE IF NOT EXISTS users (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    email VARCHAR(255) UNIQUE NOT NULL,
    preferred_unit VARCHAR(3) DEFAULT 'lbs' CHECK (preferred_unit IN ('lbs', 'kg')),
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

-- Exercises Table
CREATE TABLE IF NOT EXISTS exercises (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    name VARCHAR(100) UNIQUE NOT NULL,
    equipment VARCHAR(50),
    primary_muscle VARCHAR(50),
    secondary_muscles TEXT[],
    instructions TEXT,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

-- Workouts Table
CREATE TABLE IF NOT EXISTS workouts (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    name VARCHAR(100) NOT NULL,
    notes TEXT,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

-- Workout Exercises Table (an exercise placed in a workout, with its warm-up configuration)
CREATE TABLE IF NOT EXISTS workout_exercises (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    workout_id UUID NOT NULL REFERENCES workouts(id) ON DELETE CASCADE,
    exercise_id UUID REFERENCES exercises(id) ON DELETE RESTRICT,
    order_index INTEGER NOT NULL,
    target_sets INTEGER DEFAULT 3,
    target_reps INTEGER DEFAULT 10,
    rest_seconds INTEGER DEFAULT 90,
    superset_group VARCHAR(20),
    enable_warmups BOOLEAN, -- NULL means "not chosen yet": compound lifts default to on
    warmup_count SMALLINT NOT NULL DEFAULT 3 CHECK (warmup_count BETWEEN 1 AND 5),
    working_weight DECIMAL(7,2) NOT NULL DEFAULT 0,
    weight_unit VARCHAR(3) NOT NULL DEFAULT 'lbs' CHECK (weight_unit IN ('lbs', 'kg')),
    use_fine_increments BOOLEAN NOT NULL DEFAULT false,
    estimated_1rm DECIMAL(7,2) NOT NULL DEFAULT 0, -- 0 means no estimate
    bar_weight DECIMAL(6,2),
    notes TEXT,
    updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
    UNIQUE(workout_id, order_index)
);

CREATE INDEX IF NOT EXISTS idx_workout_exercises_workout_id ON workout_exercises(workout_id);

-- Trigger function to update 'updated_at' columns
CREATE OR REPLACE FUNCTION trigger_set_timestamp()
RETURNS TRIGGER AS $$
BEGIN
  NEW.updated_at = CURRENT_TIMESTAMP;
  RETURN NEW;
END;
$$ LANGUAGE plpgsql;

DROP TRIGGER IF EXISTS set_timestamp_workouts ON workouts;
CREATE TRIGGER set_timestamp_workouts
BEFORE UPDATE ON workouts
FOR EACH ROW
EXECUTE FUNCTION trigger_set_timestamp();

DROP TRIGGER IF EXISTS set_timestamp_workout_exercises ON workout_exercises;
CREATE TRIGGER set_timestamp_workout_exercises
BEFORE UPDATE ON workout_exercises
FOR EACH ROW
EXECUTE FUNCTION trigger_set_timestamp();
"""

def create_schema():
    conn = None
    try:
        print(f"Attempting to connect using {_db_connection_method}.")
        conn = psycopg2.connect(**conn_params)
        print(f"Successfully connected to database '{conn_params.get('dbname')}' on host '{conn_params.get('host')}'.")
        with conn.cursor() as cur:
            cur.execute(SQL_COMMANDS)
            print("Schema creation commands executed.")
        conn.commit()
        print("Schema created successfully (or already existed).")
    except psycopg2.OperationalError as e:
        print(f"Error connecting to the database using method '{_db_connection_method}': {e}")
        print("Please ensure PostgreSQL is running and accessible, "
              "and that the target database exists with appropriate permissions.")
        sys.exit(1)
    except psycopg2.Error as e:
        print(f"Error during database operation (using '{_db_connection_method}'): {e}")
        if conn:
            conn.rollback()
        sys.exit(1)
    finally:
        if conn:
            conn.close()
            print("Database connection closed.")

if __name__ == "__main__":
    print("Attempting to create/update database schema...")
    create_schema()
    print("Script finished.")
