"""
Identity persistence: accounts with name, email, password hash and role.
"""
from ..models import Identity, Role

TABLE = "identities"


def normalize_email(email):
    return (email or "").strip().lower()


class IdentityStore:
    def __init__(self, store):
        self.store = store

    def get(self, identity_id):
        if not identity_id:
            return None
        doc = self.store.find_one(TABLE, {"id": identity_id})
        return Identity.from_document(doc) if doc else None

    def get_by_email(self, email):
        doc = self.store.find_one(TABLE, {"email": normalize_email(email)})
        return Identity.from_document(doc) if doc else None

    def create(self, name, email, password_hash, role=Role.UNSET):
        identity = Identity(
            name=name,
            email=normalize_email(email),
            password_hash=password_hash,
            role=role,
        )
        self.store.insert(TABLE, identity.to_document())
        return identity

    def set_role(self, identity_id, role):
        rows = self.store.update(TABLE, {"id": identity_id}, {"role": role.value})
        return Identity.from_document(rows[0]) if rows else None
