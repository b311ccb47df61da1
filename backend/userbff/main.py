from contextlib import asynccontextmanager

from fastapi import FastAPI

from userbff.api.errors import register_exception_handlers
from userbff.api.routers import auth as auth_router
from userbff.api.routers import users as users_router
from userbff.core.config import Settings, get_settings
from userbff.core.security import PasswordHasher
from userbff.db.store import RemoteStoreClient
from userbff.repositories.base import UserRepository
from userbff.repositories.memory import InMemoryUserRepository
from userbff.repositories.users import RemoteUserRepository
from userbff.services.users import UserService


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.store.aclose()


def build_repository(
    settings: Settings, store: RemoteStoreClient, hasher: PasswordHasher
) -> UserRepository:
    if settings.user_repository == "memory":
        return InMemoryUserRepository(hasher)
    return RemoteUserRepository(store, hasher)


def create_app(
    settings: Settings | None = None,
    store: RemoteStoreClient | None = None,
    repository: UserRepository | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    store = store or RemoteStoreClient.from_settings(settings)
    hasher = PasswordHasher.from_settings(settings)
    repository = repository or build_repository(settings, store, hasher)

    app = FastAPI(
        debug=settings.debug,
        title="User BFF API",
        lifespan=lifespan,
        docs_url="/swagger-ui",
        openapi_url="/api-docs/openapi.json",
    )
    app.state.settings = settings
    app.state.store = store
    app.state.password_hasher = hasher
    app.state.user_service = UserService(repository)

    register_exception_handlers(app)
    app.include_router(auth_router.router)
    app.include_router(users_router.router)

    return app
