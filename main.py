import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.concurrency import run_in_threadpool

from api.schemas import (
    # Common
    ErrorResponse, MessageResponse, HealthResponse,
    # Profiles
    CreateProfileRequest, UpdateProfileRequest, ProfileResponse,
    # Users
    CreateUserRequest, UpdateUserRequest, UserResponse,
    UserWithProfileResponse, UserListResponse,
    # Auth
    LoginRequest, TokenResponse,
    # Email
    EmailRequest,
)
from api.dependencies import (
    get_profile_service, get_user_service, get_auth_service,
    get_current_user_id, get_database, get_email_sender,
)
from api.errors import register_exception_handlers

from application.services import ProfileService, UserService, AuthService
from domain.auth import AuthData
from domain.entities import Profile, User, UserWithProfile
from domain.errors import ServiceError
from infrastructure.config import Settings, get_settings
from infrastructure.database import MongoDatabase, DatabaseConnectionError
from infrastructure.logging_config import configure_logging
from infrastructure.mailer import SmtpEmailSender
from infrastructure.repositories.mongo_repositories import MongoProfileRepository, MongoUserRepository
from infrastructure.security import configure_password_hashing
from infrastructure.seeders import seed_profiles, seed_admin_user

logger = logging.getLogger(__name__)


# ============================================================================
# STARTUP
# ============================================================================

async def bootstrap(app: FastAPI, settings: Settings, client=None) -> MongoDatabase:
    """Connect to the database, attach the stores to app.state and seed data.

    Missing configuration or an unreachable database stops the process.
    ``client`` replaces the real MongoClient (tests use mongomock).
    """
    missing = settings.missing_required()
    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        raise SystemExit(f"Missing required environment variables: {', '.join(missing)}")

    configure_password_hashing(settings.bcrypt_rounds)

    database = MongoDatabase(settings.db_url, settings.db_name, settings.db_timeout_ms, client=client)
    try:
        await run_in_threadpool(database.connect)
    except DatabaseConnectionError as exc:
        logger.critical("Database unavailable: %s", exc)
        raise SystemExit(str(exc))

    app.state.database = database
    app.state.profile_repository = MongoProfileRepository(database)
    app.state.user_repository = MongoUserRepository(database)

    try:
        if settings.seed_profiles:
            await seed_profiles(app.state.profile_repository)
        if settings.seed_admin_email and settings.seed_admin_password:
            await seed_admin_user(
                app.state.user_repository,
                app.state.profile_repository,
                email=settings.seed_admin_email,
                password=settings.seed_admin_password,
                nome=settings.seed_admin_name,
            )
    except ServiceError as exc:
        logger.error("Seeding failed: %s", exc.message)

    return database


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_file)
    database = await bootstrap(app, settings)
    logger.info("Server ready on %s:%s", settings.host, settings.port)
    try:
        yield
    finally:
        database.close()


app = FastAPI(
    title="User & Profile API",
    description="Cadastro de usuários e perfis com autenticação por token",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

register_exception_handlers(app)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================

@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(database: Optional[MongoDatabase] = Depends(get_database)):
    """Health check endpoint; db_connection is "503" when the ping fails"""
    db_ok = database is not None and await run_in_threadpool(database.ping)
    return {"app_status": "200", "db_connection": "200" if db_ok else "503"}


@app.post("/enviar-email", response_model=MessageResponse, responses=ERROR_RESPONSES, tags=["Email"])
async def send_email(
    request: EmailRequest,
    sender: SmtpEmailSender = Depends(get_email_sender),
):
    """Send a plain-text email synchronously, no retry"""
    await run_in_threadpool(sender.send, request.to, request.subject, request.body)
    return {"message": "Email enviado com sucesso!"}


@app.post("/logar", response_model=TokenResponse, responses=ERROR_RESPONSES, tags=["Auth"])
async def login(
    request: LoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    """Exchange email and senha for a session token"""
    token = await service.login(AuthData(email=request.email, senha=request.senha))
    return {"token": token}

# ============================================================================
# PROFILE ENDPOINTS
# ============================================================================

@app.post("/perfis", response_model=ProfileResponse, status_code=201, responses=ERROR_RESPONSES, tags=["Perfis"])
async def create_profile(
    request: CreateProfileRequest,
    service: ProfileService = Depends(get_profile_service),
    current_user_id: str = Depends(get_current_user_id),
):
    """Create new profile"""
    profile = await service.create_profile(nome=request.nome, descricao=request.descricao)
    return _profile_to_response(profile)


@app.get("/perfis", response_model=List[ProfileResponse], responses=ERROR_RESPONSES, tags=["Perfis"])
async def get_all_profiles(
    service: ProfileService = Depends(get_profile_service),
    current_user_id: str = Depends(get_current_user_id),
):
    """Get all profiles"""
    profiles = await service.get_all_profiles()
    return [_profile_to_response(p) for p in profiles]


@app.get("/perfis/nome/{nome}", response_model=ProfileResponse, responses=ERROR_RESPONSES, tags=["Perfis"])
async def get_profile_by_name(
    nome: str,
    service: ProfileService = Depends(get_profile_service),
    current_user_id: str = Depends(get_current_user_id),
):
    """Get profile by name"""
    profile = await service.get_profile_by_name(nome)
    return _profile_to_response(profile)


@app.get("/perfis/{profile_id}", response_model=ProfileResponse, responses=ERROR_RESPONSES, tags=["Perfis"])
async def get_profile(
    profile_id: str,
    service: ProfileService = Depends(get_profile_service),
    current_user_id: str = Depends(get_current_user_id),
):
    """Get profile by ID"""
    profile = await service.get_profile(profile_id)
    return _profile_to_response(profile)


@app.put("/perfis/{profile_id}", response_model=MessageResponse, status_code=201, responses=ERROR_RESPONSES, tags=["Perfis"])
async def update_profile(
    profile_id: str,
    request: UpdateProfileRequest,
    service: ProfileService = Depends(get_profile_service),
    current_user_id: str = Depends(get_current_user_id),
):
    """Update profile description"""
    await service.update_description(profile_id, request.descricao)
    return {"message": "Perfil atualizado com sucesso!"}


@app.delete("/perfis/{profile_id}", response_model=MessageResponse, responses=ERROR_RESPONSES, tags=["Perfis"])
async def delete_profile(
    profile_id: str,
    service: ProfileService = Depends(get_profile_service),
    current_user_id: str = Depends(get_current_user_id),
):
    """Delete profile"""
    await service.delete_profile(profile_id)
    return {"message": "Perfil deletado com sucesso!"}

# ============================================================================
# USER ENDPOINTS
# ============================================================================

@app.get("/profile", response_model=UserWithProfileResponse, responses=ERROR_RESPONSES, tags=["Usuarios"])
async def get_logged_user(
    service: UserService = Depends(get_user_service),
    current_user_id: str = Depends(get_current_user_id),
):
    """Get the user identified by the session token, with its profile"""
    entry = await service.get_user(current_user_id)
    return _user_with_profile_to_response(entry)


@app.get("/usuarios", response_model=UserListResponse, responses=ERROR_RESPONSES, tags=["Usuarios"])
async def get_all_users(
    service: UserService = Depends(get_user_service),
    current_user_id: str = Depends(get_current_user_id),
):
    """Get all users with their profiles"""
    entries = await service.get_all_users()
    return UserListResponse(
        total_usuarios=len(entries),
        usuarios=[_user_with_profile_to_response(e) for e in entries],
    )


@app.get("/usuarios/{user_id}", response_model=UserWithProfileResponse, responses=ERROR_RESPONSES, tags=["Usuarios"])
async def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
    current_user_id: str = Depends(get_current_user_id),
):
    """Get user by ID with its profile"""
    entry = await service.get_user(user_id)
    return _user_with_profile_to_response(entry)


@app.post("/usuarios", response_model=UserResponse, status_code=201, responses=ERROR_RESPONSES, tags=["Usuarios"])
async def create_user(
    request: CreateUserRequest,
    service: UserService = Depends(get_user_service),
    current_user_id: str = Depends(get_current_user_id),
):
    """Create new user; the password is hashed before it is stored"""
    user = await service.create_user(User(**request.model_dump()))
    return _user_to_response(user)


@app.put("/usuarios/{user_id}", response_model=UserResponse, responses=ERROR_RESPONSES, tags=["Usuarios"])
async def update_user(
    user_id: str,
    request: UpdateUserRequest,
    service: UserService = Depends(get_user_service),
    current_user_id: str = Depends(get_current_user_id),
):
    """Update user; an empty senha keeps the current password"""
    user = await service.update_user(user_id, User(**request.model_dump()))
    return _user_to_response(user)


@app.delete("/usuarios/{user_id}", response_model=MessageResponse, responses=ERROR_RESPONSES, tags=["Usuarios"])
async def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
    current_user_id: str = Depends(get_current_user_id),
):
    """Delete user"""
    await service.delete_user(user_id)
    return {"message": "Usuário deletado com sucesso!"}

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _profile_to_response(profile: Profile) -> ProfileResponse:
    """Convert Profile entity to ProfileResponse"""
    return ProfileResponse(
        id=profile.id,
        nome=profile.nome,
        descricao=profile.descricao,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
        deleted_at=profile.deleted_at,
    )


def _user_to_response(user: User) -> UserResponse:
    """Convert User entity to UserResponse, leaving the hash behind"""
    return UserResponse(
        id=user.id,
        nome=user.nome,
        email=user.email,
        documento=user.documento,
        telefone=user.telefone,
        cidade=user.cidade,
        perfil_id=user.perfil_id,
        created_at=user.created_at,
        updated_at=user.updated_at,
        deleted_at=user.deleted_at,
    )


def _user_with_profile_to_response(entry: UserWithProfile) -> UserWithProfileResponse:
    return UserWithProfileResponse(
        usuario=_user_to_response(entry.usuario),
        perfil=_profile_to_response(entry.perfil),
    )


def run() -> None:
    """Console entry point"""
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
