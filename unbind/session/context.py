from __future__ import annotations
import base64
import hashlib
import hmac
import json
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from unbind.session.store import JsonStore
from unbind.utils.exception import AuthError
from unbind.utils.logger import logger
from unbind.utils.types import AnalysisResponse, StoredAnalysis, User

GOOGLE_PASSWORD_SENTINEL = "GOOGLE_AUTHENTICATED"
_PBKDF2_ROUNDS = 200_000


def hash_password(password: str, salt: Optional[bytes] = None) -> str:
    salt = salt or os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, _PBKDF2_ROUNDS)
    return f"pbkdf2${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        scheme, salt_hex, _ = stored.split("$")
    except ValueError:
        return False
    if scheme != "pbkdf2":
        return False
    return hmac.compare_digest(hash_password(password, bytes.fromhex(salt_hex)), stored)


def decode_jwt_payload(credential: str) -> Dict[str, Any]:
    """Decode a JWT's payload segment without verifying its signature."""
    try:
        segment = credential.split(".")[1]
        padded = segment + "=" * (-len(segment) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded))
    except (IndexError, ValueError) as e:
        raise AuthError("Invalid Google credential.") from e
    if not isinstance(payload, dict):
        raise AuthError("Invalid Google credential.")
    return payload


def _user_from_record(record: Dict[str, Any]) -> User:
    return User(id=record["id"], username=record["username"], email=record["email"], picture=record.get("picture"))


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class SessionContext:
    """Explicit per-client session: created with a store, ``load()`` on start, ``logout()`` to tear down."""

    def __init__(self, store: JsonStore):
        self.store = store
        self._user: Optional[User] = None

    @property
    def current_user(self) -> Optional[User]:
        return self._user

    def load(self) -> Optional[User]:
        record = self.store.get_session()
        self._user = _user_from_record(record) if record else None
        return self._user

    def _start(self, user: User) -> User:
        self._user = user
        self.store.set_session(user.to_dict())
        logger.info("Session started for %s", user.id)
        return user

    def signup(self, username: str, email: str, password: str) -> User:
        users = self.store.get_users()
        if any(u["username"].lower() == username.lower() for u in users):
            raise AuthError("This username is already taken.")
        if any(u["email"].lower() == email.lower() for u in users):
            raise AuthError("An account with this email already exists.")
        user = User(id=_new_id("user"), username=username, email=email)
        self.store.add_user({**user.to_dict(), "passwordHash": hash_password(password)})
        return self._start(user)

    def login(self, email: str, password: str) -> User:
        record = next((u for u in self.store.get_users() if u["email"].lower() == email.lower()), None)
        if record is None or not verify_password(password, record.get("passwordHash", "")):
            raise AuthError("Invalid email or password.")
        return self._start(_user_from_record(record))

    def login_with_google(self, credential: str) -> User:
        payload = decode_jwt_payload(credential)
        email = payload.get("email")
        if not email:
            raise AuthError("Google credential has no email.")
        users = self.store.get_users()
        record = next((u for u in users if u["email"].lower() == email.lower()), None)
        if record is None:
            base = payload.get("name") or email.split("@")[0]
            taken = {u["username"].lower() for u in users}
            username, counter = base, 1
            while username.lower() in taken:
                username = f"{base}{counter}"
                counter += 1
            user = User(id=_new_id("user"), username=username, email=email, picture=payload.get("picture"))
            self.store.add_user({**user.to_dict(), "passwordHash": GOOGLE_PASSWORD_SENTINEL})
            return self._start(user)
        return self._start(_user_from_record(record))

    def logout(self) -> None:
        self._user = None
        self.store.set_session(None)

    def save_analysis(self, analysis: AnalysisResponse, file_name: str, document_text: str) -> StoredAnalysis:
        if self._user is None:
            raise AuthError("You must be logged in to save an analysis.")
        stored = StoredAnalysis(
            id=_new_id("analysis"),
            user_id=self._user.id,
            file_name=file_name,
            analysis_date=datetime.now(timezone.utc).isoformat(),
            analysis_result=analysis,
            document_text=document_text,
        )
        self.store.add_analysis(stored)
        return stored

    def user_analyses(self) -> List[StoredAnalysis]:
        if self._user is None:
            return []
        mine = [a for a in self.store.get_analyses() if a.user_id == self._user.id]
        return sorted(reversed(mine), key=lambda a: a.analysis_date, reverse=True)
