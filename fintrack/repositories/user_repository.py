from sqlalchemy.orm import Session
from fintrack.models.user import User


class UserRepository:
    """Repository for User model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_or_create_by_auth_id(
        self, auth_user_id: str, email: str | None = None, display_name: str | None = None
    ) -> User:
        """
        Get user by auth_user_id or create if doesn't exist.

        This is called automatically when a user makes their first API
        request with a valid JWT.

        Args:
            auth_user_id: User ID from JWT 'sub' claim
            email: Optional email to store on creation
            display_name: Optional display name to store on creation

        Returns:
            User object (either existing or newly created)
        """
        user = self.db.query(User).filter(User.auth_user_id == auth_user_id).first()

        if not user:
            user = User(
                auth_user_id=auth_user_id,
                email=email,
                display_name=display_name,
                tenant_ids=[],
            )
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)

        return user

    def get_by_auth_id(self, auth_user_id: str) -> User | None:
        """Get user by auth_user_id"""
        return self.db.query(User).filter(User.auth_user_id == auth_user_id).first()

    def get_by_id(self, user_id: int) -> User | None:
        """Get user by internal ID"""
        return self.db.query(User).filter(User.id == user_id).first()

    def attach_tenant(self, user: User, tenant_id: int) -> User:
        """
        Record tenant_id on the user without committing.

        The JSON column is reassigned rather than mutated in place so the
        ORM detects the change.
        """
        tenant_ids = list(user.tenant_ids or [])
        if tenant_id not in tenant_ids:
            tenant_ids.append(tenant_id)
        user.tenant_ids = tenant_ids
        self.db.flush()
        return user
