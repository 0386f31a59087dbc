from typing import Optional

from fastapi import FastAPI

from clinic.api.routes import auth, pages, records, workspace
from clinic.core.config import Settings, settings as default_settings
from clinic.core.firebase import StoreClient, init_firebase
from clinic.services.authorization import GateRegistry
from clinic.services.logger import configure_logging, logger
from clinic.services.subscriptions import ClinicState
from clinic.services.workspace import WorkspaceRegistry


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[StoreClient] = None,
    timer_factory=None,
) -> FastAPI:
    """
    Build the application. ``store`` replaces the Firebase handle (tests
    pass an in-memory one); otherwise it is created at startup.
    """
    settings = settings or default_settings
    configure_logging(settings.CLINIC_DEBUG_MODE)

    app = FastAPI(title="Clinic Management")
    app.state.settings = settings
    app.state.store = store
    app.state.owns_store = False
    app.state.clinic = None
    app.state.gates = None
    app.state.workspaces = None

    @app.on_event("startup")
    def startup():
        """Connect to Firebase and mount the live subscriptions."""
        if app.state.store is None:
            app.state.store = init_firebase(settings)
            app.state.owns_store = True
        client = app.state.store

        app.state.gates = GateRegistry(client)

        if client.available:
            app.state.clinic = ClinicState(client, settings.DATE_FORMAT)
            app.state.clinic.start()
        else:
            logger.warning("Store unavailable; feature routes will answer 503.")

        app.state.workspaces = WorkspaceRegistry(
            client,
            app.state.clinic,
            settings.DATE_FORMAT,
            tick_seconds=settings.TIMER_TICK_SECONDS,
            timer_factory=timer_factory,
        )

    @app.on_event("shutdown")
    def shutdown():
        """Tear down every subscription and timer."""
        if app.state.workspaces is not None:
            app.state.workspaces.close()
        if app.state.clinic is not None:
            app.state.clinic.close()
        if app.state.gates is not None:
            app.state.gates.close()
        if app.state.owns_store:
            app.state.store.close()

    # Include API routers
    app.include_router(pages.router)
    app.include_router(auth.router)
    app.include_router(records.router)
    app.include_router(workspace.router)

    return app


app = create_app()
