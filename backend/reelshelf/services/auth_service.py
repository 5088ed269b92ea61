"""Authentication and account service with business logic."""

from sqlalchemy.orm import Session
from datetime import datetime, timedelta
from typing import Optional, Tuple

from reelshelf.models.user import User, UserSession
from reelshelf.models.schemas import UserCreate, UserLogin, UserUpdate
from reelshelf.utils.security import hash_password, verify_password, create_access_token, validate_password_strength
from reelshelf.utils.validators import validate_email, validate_username, sanitize_input
from reelshelf.services.logging_service import logger
from reelshelf.config import settings


class AuthService:
    """Service for authentication operations."""

    @staticmethod
    def register_user(db: Session, user_data: UserCreate) -> Tuple[Optional[User], Optional[str]]:
        """
        Register a new user.

        Args:
            db: Database session
            user_data: User registration data

        Returns:
            Tuple of (user, error_message)
        """
        email = user_data.email.lower()

        # Validate email
        is_valid, error = validate_email(email)
        if not is_valid:
            return None, error

        # Validate username
        is_valid, error = validate_username(user_data.username)
        if not is_valid:
            return None, error

        # Validate password strength
        is_valid, error = validate_password_strength(user_data.password)
        if not is_valid:
            return None, error

        # Check if email already exists
        existing_user = db.query(User).filter(User.email == email).first()
        if existing_user:
            return None, "Email already registered"

        # Check if username already exists
        existing_user = db.query(User).filter(User.username == user_data.username).first()
        if existing_user:
            return None, "Username already taken"

        new_user = User(
            email=email,
            username=user_data.username,
            hashed_password=hash_password(user_data.password),
            is_active=True,
            favorite_movies=[],
            favorite_tv_shows=[],
            favorite_games=[]
        )

        db.add(new_user)
        db.commit()
        db.refresh(new_user)

        logger.info("User registered", user_id=str(new_user.id), username=new_user.username)
        return new_user, None

    @staticmethod
    def authenticate_user(db: Session, login_data: UserLogin) -> Tuple[Optional[User], Optional[str]]:
        """
        Authenticate a user with username/password.

        Args:
            db: Database session
            login_data: Login credentials

        Returns:
            Tuple of (user, error_message)
        """
        # Find user by username or email
        user = db.query(User).filter(
            (User.username == login_data.username) | (User.email == login_data.username.lower())
        ).first()

        if not user:
            return None, "Invalid credentials"

        if not user.is_active:
            return None, "Account is deactivated"

        if not verify_password(login_data.password, user.hashed_password):
            logger.warning("Failed login attempt", username=login_data.username)
            return None, "Invalid credentials"

        # Update last login
        user.last_login = datetime.utcnow()
        db.commit()

        return user, None

    @staticmethod
    def create_user_session(
        db: Session,
        user: User,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> str:
        """
        Create a new user session and JWT token.

        Args:
            db: Database session
            user: User object
            ip_address: Client IP address
            user_agent: Client user agent

        Returns:
            JWT access token
        """
        token_data = {
            "sub": str(user.id),
            "username": user.username
        }
        access_token = create_access_token(token_data)

        expires_at = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        session = UserSession(
            user_id=user.id,
            session_token=access_token,
            ip_address=ip_address,
            user_agent=user_agent,
            expires_at=expires_at
        )

        db.add(session)
        db.commit()

        return access_token

    @staticmethod
    def refresh_user_session(db: Session, user: User, old_token: str) -> str:
        """
        Replace a session token with one carrying the user's current claims.

        Used after a profile update so the token's username stays accurate.

        Args:
            db: Database session
            user: User object (already updated)
            old_token: Token of the session being replaced

        Returns:
            New JWT access token
        """
        old_session = db.query(UserSession).filter(UserSession.session_token == old_token).first()
        ip_address = old_session.ip_address if old_session else None
        user_agent = old_session.user_agent if old_session else None

        if old_session:
            db.delete(old_session)
            db.flush()

        return AuthService.create_user_session(db, user, ip_address=ip_address, user_agent=user_agent)

    @staticmethod
    def validate_session(db: Session, token: str) -> Tuple[Optional[User], Optional[str]]:
        """
        Validate a session token.

        Args:
            db: Database session
            token: JWT token

        Returns:
            Tuple of (user, error_message)
        """
        session = db.query(UserSession).filter(UserSession.session_token == token).first()

        if not session:
            return None, "Invalid session"

        if session.expires_at < datetime.utcnow():
            db.delete(session)
            db.commit()
            return None, "Session expired"

        session.last_activity = datetime.utcnow()
        db.commit()

        user = db.query(User).filter(User.id == session.user_id).first()
        if not user or not user.is_active:
            return None, "User not found or inactive"

        return user, None

    @staticmethod
    def logout_user(db: Session, token: str) -> bool:
        """
        Logout user by deleting session.

        Args:
            db: Database session
            token: JWT token

        Returns:
            True if successful, False otherwise
        """
        session = db.query(UserSession).filter(UserSession.session_token == token).first()
        if session:
            db.delete(session)
            db.commit()
            return True
        return False

    @staticmethod
    def update_profile(db: Session, user: User, update: UserUpdate) -> Tuple[Optional[User], Optional[str]]:
        """
        Update username, email, bio or picture.

        Args:
            db: Database session
            user: User being updated
            update: Fields to change (unset fields are left alone)

        Returns:
            Tuple of (user, error_message)
        """
        fields = update.model_dump(exclude_unset=True)

        if fields.get("username") is not None and fields["username"] != user.username:
            is_valid, error = validate_username(fields["username"])
            if not is_valid:
                return None, error

            taken = db.query(User).filter(User.username == fields["username"], User.id != user.id).first()
            if taken:
                return None, "Username already taken"
            user.username = fields["username"]

        if fields.get("email") is not None and fields["email"].lower() != user.email:
            email = fields["email"].lower()
            taken = db.query(User).filter(User.email == email, User.id != user.id).first()
            if taken:
                return None, "Email already in use"
            user.email = email

        if "bio" in fields:
            user.bio = sanitize_input(fields["bio"] or "", max_length=500) or None

        if "profile_picture" in fields:
            user.profile_picture = fields["profile_picture"] or None

        db.commit()
        db.refresh(user)

        return user, None

    @staticmethod
    def change_password(
        db: Session,
        user: User,
        current_password: str,
        new_password: str
    ) -> Tuple[bool, Optional[str]]:
        """
        Change a user's password.

        Args:
            db: Database session
            user: User object
            current_password: Must match the stored hash
            new_password: Replacement password

        Returns:
            Tuple of (success, error_message)
        """
        if not verify_password(current_password, user.hashed_password):
            return False, "Current password is incorrect"

        is_valid, error = validate_password_strength(new_password)
        if not is_valid:
            return False, error

        user.hashed_password = hash_password(new_password)
        db.commit()

        logger.info("Password changed", user_id=str(user.id))
        return True, None

    @staticmethod
    def delete_account(db: Session, user: User) -> None:
        """
        Delete a user and everything they own.

        Args:
            db: Database session
            user: User to delete
        """
        user_id = str(user.id)
        db.delete(user)
        db.commit()
        logger.info("Account deleted", user_id=user_id)

    @staticmethod
    def cleanup_expired_sessions(db: Session) -> int:
        """
        Clean up expired sessions.

        Args:
            db: Database session

        Returns:
            Number of sessions deleted
        """
        count = db.query(UserSession).filter(
            UserSession.expires_at < datetime.utcnow()
        ).delete()
        db.commit()
        return count
