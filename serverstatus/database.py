import logging
import os
import sqlite3
from contextlib import closing

logger = logging.getLogger(__name__)

# Names of the values kept by the bot
MESSAGE_ID_KEY = "discord_message_id"
ALL_TIME_RECORD_KEY = "online_player_record"


# Base database class
class Database:

    def __init__(self, filename: str):
        self.filename = filename
        self.initialize()

    # Initializes the database
    def initialize(self):
        pass

    # Decides if the database is already initialized
    # (if the file is present)
    def initialized(self) -> bool:
        return os.path.isfile(self.filename)

    # Executes a query into the database
    def execute_query(self, query, tuple=()):
        logger.debug(f"Executing query {query}")
        try:
            with closing(sqlite3.connect(self.filename)) as connection:
                cursor = connection.cursor()
                cursor.execute(query, tuple)
                result = cursor.fetchall()
                connection.commit()
        except sqlite3.Error as error:
            logger.error(f"Could not execute query to the database: {query}")
            logger.error(str(error))
            return None
        return result


# Durable key-value store living in a single sqlite file.
# Values are raw bytes, the caller decides how to encode them
class Store(Database):

    def initialize(self):

        logger.info("Initialising database")
        if not self.initialized():
            logger.info("Creating table store")
        else:
            logger.info("Database already present")
        query = """CREATE TABLE IF NOT EXISTS store (
            'name' VARCHAR(256) NOT NULL DEFAULT '',
            'value' BLOB DEFAULT NULL,
            PRIMARY KEY ('name'));"""
        self.execute_query(query)
        return True

    # Decides if a value has been stored under the provided name
    def exists(self, name: str) -> bool:

        result = self.execute_query("SELECT name FROM store WHERE name=?;", (name,))
        return bool(result)

    # Returns the value stored under the provided name, None if absent
    def read(self, name: str) -> bytes | None:

        result = self.execute_query("SELECT value FROM store WHERE name=?;", (name,))
        if not result:
            return None
        value = result[0][0]
        if isinstance(value, str):
            value = value.encode("utf-8")
        return value

    # Creates or overwrites the value stored under the provided name.
    # Returns False if the value could not be written
    def write(self, name: str, value: bytes) -> bool:

        logger.debug(f"Writing value {name} to the database")
        result = self.execute_query(
            "INSERT OR REPLACE INTO store (name, value) VALUES (?, ?);",
            (
                name,
                value,
            ),
        )
        return result is not None
