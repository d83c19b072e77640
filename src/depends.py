from datetime import timedelta

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.bcrypt_secret_hasher import BcryptSecretHasher
from src.adapter.services.jwt_token_signer import JoseTokenSigner
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.secret_hasher import ISecretHasher
from src.app.services.token_signer import ITokenSigner
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import LoginUseCase, SessionAuthority

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer()


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_token_signer() -> ITokenSigner:
    return JoseTokenSigner(
        secret=ApplicationConfig.JWT_SECRET,
        issuer=ApplicationConfig.JWT_ISSUER,
        algorithm=ApplicationConfig.JWT_ALGORITHM,
    )


def get_secret_hasher() -> ISecretHasher:
    return BcryptSecretHasher(rounds=ApplicationConfig.BCRYPT_ROUNDS)


def get_session_authority(
    uow: UnitOfWork = Depends(get_unit_of_work),
    signer: ITokenSigner = Depends(get_token_signer),
    hasher: ISecretHasher = Depends(get_secret_hasher),
) -> SessionAuthority:
    return SessionAuthority(
        uow,
        signer,
        hasher,
        access_ttl=timedelta(seconds=ApplicationConfig.ACCESS_TOKEN_TTL_SECONDS),
        refresh_ttl=timedelta(seconds=ApplicationConfig.REFRESH_TOKEN_TTL_SECONDS),
    )


def get_login_use_case(
    uow: UnitOfWork = Depends(get_unit_of_work),
    hasher: ISecretHasher = Depends(get_secret_hasher),
    session_authority: SessionAuthority = Depends(get_session_authority),
) -> LoginUseCase:
    return LoginUseCase(
        uow,
        hasher,
        session_authority,
        require_email_verification=ApplicationConfig.REQUIRE_EMAIL_VERIFICATION,
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session_authority: SessionAuthority = Depends(get_session_authority),
) -> dict:
    """
    Dependency to extract and verify the access token from Authorization header.

    Args:
        credentials: Bearer token from Authorization header

    Returns:
        Decoded JWT claims containing sub (user account id) and sid (session id)

    Raises:
        HTTPException: 401 if token is invalid, expired or not an access token
    """
    payload = session_authority.verify_access_token(credentials.credentials)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    return payload
