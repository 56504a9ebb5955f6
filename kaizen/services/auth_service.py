"""Authentication service - business logic for users and their settings."""
import logging

from bson import ObjectId
from bson.errors import InvalidId

from kaizen.errors import InvalidInputError, NotFoundError, UnauthorizedError
from kaizen.models.user import User, UserSettings, UserSettingsUpdate, UserUpdate
from kaizen.utils.auth import create_access_token, hash_password, verify_password
from kaizen.utils.timeutils import utc_now

logger = logging.getLogger(__name__)


class AuthService:
    """Service for handling user authentication and profile data."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.users = db["users"]

    def _doc_to_user(self, doc: dict) -> User:
        return User(
            _id=str(doc["_id"]),
            email=doc["email"],
            name=doc["name"],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def _find_user(self, user_id: str) -> dict:
        try:
            object_id = ObjectId(user_id)
        except (InvalidId, TypeError):
            raise InvalidInputError("Invalid user ID format")

        user_doc = await self.users.find_one({"_id": object_id})
        if not user_doc:
            raise NotFoundError("User not found")
        return user_doc

    async def register_user(self, email: str, password: str, name: str) -> User:
        """
        Register a new user with default settings.

        Raises:
            InvalidInputError: If email is already registered
        """
        existing = await self.users.find_one({"email": email})
        if existing:
            raise InvalidInputError("Email already registered")

        now = utc_now()
        user_doc = {
            "email": email,
            "hashed_password": hash_password(password),
            "name": name,
            "settings": UserSettings().model_dump(mode="json"),
            "created_at": now,
            "updated_at": now,
        }

        result = await self.users.insert_one(user_doc)
        user_doc["_id"] = result.inserted_id
        logger.info("Registered user %s", result.inserted_id)

        return self._doc_to_user(user_doc)

    async def login(self, email: str, password: str) -> str:
        """
        Check credentials and issue an access token.

        Raises:
            UnauthorizedError: If credentials are invalid
        """
        user_doc = await self.users.find_one({"email": email})
        if not user_doc or not verify_password(password, user_doc["hashed_password"]):
            raise UnauthorizedError("Invalid email or password")

        return create_access_token(user_id=str(user_doc["_id"]))

    async def get_user_by_id(self, user_id: str) -> User:
        """
        Get user by ID.

        Raises:
            InvalidInputError: If the id is malformed
            NotFoundError: If user not found
        """
        return self._doc_to_user(await self._find_user(user_id))

    async def update_user(self, user_id: str, user_update: UserUpdate) -> User:
        """
        Update name and/or email.

        Raises:
            InvalidInputError: If the new email belongs to another user
            NotFoundError: If user not found
        """
        user_doc = await self._find_user(user_id)

        update_doc = {"updated_at": utc_now()}
        if user_update.name is not None:
            update_doc["name"] = user_update.name
        if user_update.email is not None and user_update.email != user_doc["email"]:
            taken = await self.users.find_one({"email": user_update.email})
            if taken:
                raise InvalidInputError("Email already registered")
            update_doc["email"] = user_update.email

        updated_doc = await self.users.find_one_and_update(
            {"_id": user_doc["_id"]},
            {"$set": update_doc},
            return_document=True,
        )
        return self._doc_to_user(updated_doc)

    async def get_settings(self, user_id: str) -> UserSettings:
        """Get display settings, falling back to defaults for missing keys."""
        user_doc = await self._find_user(user_id)
        return UserSettings(**(user_doc.get("settings") or {}))

    async def update_settings(
        self,
        user_id: str,
        settings_update: UserSettingsUpdate,
    ) -> UserSettings:
        """Merge a partial settings update into the stored settings."""
        current = await self.get_settings(user_id)
        merged = current.model_copy(
            update=settings_update.model_dump(exclude_none=True)
        )

        await self.users.update_one(
            {"_id": ObjectId(user_id)},
            {"$set": {
                "settings": merged.model_dump(mode="json"),
                "updated_at": utc_now(),
            }},
        )
        return merged
