# SPDX-License-Identifier: GPL-3.0-only
"""Peewee Database ORM Models."""

import datetime

from peewee import BlobField, BooleanField, CharField, DateTimeField, Model, TextField

from src.db import connect

database = connect()


class ResourceState(Model):
    """Model representing persisted resource state."""

    address = CharField(primary_key=True)
    type_name = CharField()
    resource_id = CharField(null=True)
    attributes = TextField()
    sensitive_attributes = BlobField(null=True)
    encrypted = BooleanField(default=False)
    date_created = DateTimeField(default=datetime.datetime.now)
    date_updated = DateTimeField(default=datetime.datetime.now)

    class Meta:
        """Meta class to define database connection."""

        database = database
        table_name = "resource_states"
