"""Account store database models."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, String, text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class DBAccount(Base):  # type: ignore
    """
    One row per user identity.

    +---------------+--------------+------+-----+---------+
    | Field         | Type         | Null | Key | Default |
    +---------------+--------------+------+-----+---------+
    | account_id    | varchar(36)  | NO   | PRI | uuid4   |
    | email         | varchar(255) | NO   | UNI |         |
    | name          | varchar(255) | NO   | MUL |         |
    | password_hash | varchar(255) | YES  |     | NULL    |
    | verified      | tinyint(1)   | NO   |     | 0       |
    | otp           | varchar(32)  | YES  |     | NULL    |
    | otp_issued_at | datetime     | YES  |     | NULL    |
    | refresh_token | varchar(512) | YES  | MUL | NULL    |
    | provider_id   | varchar(255) | YES  |     | NULL    |
    | created_at    | datetime     | YES  |     | NULL    |
    | updated_at    | datetime     | YES  |     | NULL    |
    | version       | int(11)      | NO   |     | 0       |
    +---------------+--------------+------+-----+---------+
    """

    __tablename__ = 'accounts'

    account_id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=False, index=True)
    password_hash = Column(String(255))
    verified = Column(Boolean, nullable=False, default=False,
                      server_default=text('0'))
    otp = Column(String(32))
    otp_issued_at = Column(DateTime(timezone=True))
    refresh_token = Column(String(512), index=True)
    provider_id = Column(String(255))
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))
    version = Column(Integer, nullable=False, default=0,
                     server_default=text('0'))
