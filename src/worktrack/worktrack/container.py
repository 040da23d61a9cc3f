from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .customers.mysql_customer_repository import MySQLCustomerRepository
from .customers.service import CustomerService
from .database.capabilities import OptionalTables, OptionalTableWarner, SchemaCapabilities, SchemaSnapshot
from .database.connection import DatabaseConnection
from .database.tracking import TrackedDatabase
from .desktop.activity_service import ActivityService
from .desktop.mysql_activity_repository import MySQLActivityRepository
from .desktop.mysql_desktop_repository import MySQLDesktopRepository
from .desktop.service import DesktopService
from .events.bus import ChangeBus
from .health.lifecycle import Lifecycle
from .health.service import HealthService
from .items.mysql_item_repository import MySQLItemRepository
from .items.service import ItemService
from .lookups.mysql_lookup_repository import MySQLLookupRepository
from .lookups.service import LookupService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.service import ProjectService
from .realtime.hub import DesktopHub
from .security.guards import AuthGuard
from .security.tokens import AuthSettings, TokenService
from .settings import AppSettings
from .timetracking.mysql_time_tracking_repository import MySQLTimeTrackingRepository
from .timetracking.service import TimeTrackingService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    settings: AppSettings

    db: DatabaseConnection
    tracked_db: TrackedDatabase
    bus: ChangeBus
    capabilities: SchemaCapabilities
    optional_tables: OptionalTables
    tokens: TokenService
    auth_guard: AuthGuard
    lifecycle: Lifecycle
    hub: DesktopHub

    users_repo: MySQLUserRepository
    customers_repo: MySQLCustomerRepository
    projects_repo: MySQLProjectRepository
    items_repo: MySQLItemRepository
    lookups_repo: MySQLLookupRepository
    time_tracking_repo: MySQLTimeTrackingRepository
    desktop_repo: MySQLDesktopRepository
    activities_repo: MySQLActivityRepository

    auth_service: AuthService
    user_service: UserService
    customer_service: CustomerService
    project_service: ProjectService
    item_service: ItemService
    lookup_service: LookupService
    time_tracking_service: TimeTrackingService
    desktop_service: DesktopService
    activity_service: ActivityService
    health_service: HealthService


def build_container(
    *,
    settings: AppSettings,
    database=None,
    timer_factory: Callable = threading.Timer,
    capabilities_loader: Optional[Callable[[], SchemaSnapshot]] = None,
) -> Container:
    """Wire the object graph.

    ``database`` defaults to a pooled MySQL connection built from the settings;
    tests pass an in-memory stand-in. Every repository gets the tracked
    database so that writes reach the change bus.
    """

    db = database if database is not None else DatabaseConnection(settings.db)
    bus = ChangeBus(debounce_ms=settings.debounce_ms, timer_factory=timer_factory)
    tracked_db = TrackedDatabase(db, bus)

    capabilities = SchemaCapabilities(db, loader=capabilities_loader)
    optional_tables = OptionalTables(
        capabilities, OptionalTableWarner(cooldown_seconds=settings.optional_table_warn_cooldown_seconds)
    )

    tokens = TokenService(
        AuthSettings(
            required=settings.auth_required,
            secret=settings.jwt_secret,
            expires_in=settings.jwt_expires_in,
        )
    )
    auth_guard = AuthGuard(tokens)
    lifecycle = Lifecycle()

    users_repo = MySQLUserRepository(tracked_db)
    customers_repo = MySQLCustomerRepository(tracked_db)
    projects_repo = MySQLProjectRepository(tracked_db, capabilities)
    items_repo = MySQLItemRepository(tracked_db)
    lookups_repo = MySQLLookupRepository(tracked_db)
    time_tracking_repo = MySQLTimeTrackingRepository(tracked_db)
    desktop_repo = MySQLDesktopRepository(tracked_db)
    activities_repo = MySQLActivityRepository(tracked_db)

    auth_service = AuthService(users_repo, tokens)
    user_service = UserService(users_repo, optional_tables)

    hub = DesktopHub(
        name_resolver=user_service.display_name,
        auth_required=settings.auth_required,
        heartbeat_seconds=settings.heartbeat_seconds,
        endpoint=settings.ws_path,
    )
    hub.attach(bus)

    return Container(
        settings=settings,
        db=db,
        tracked_db=tracked_db,
        bus=bus,
        capabilities=capabilities,
        optional_tables=optional_tables,
        tokens=tokens,
        auth_guard=auth_guard,
        lifecycle=lifecycle,
        hub=hub,
        users_repo=users_repo,
        customers_repo=customers_repo,
        projects_repo=projects_repo,
        items_repo=items_repo,
        lookups_repo=lookups_repo,
        time_tracking_repo=time_tracking_repo,
        desktop_repo=desktop_repo,
        activities_repo=activities_repo,
        auth_service=auth_service,
        user_service=user_service,
        customer_service=CustomerService(customers_repo, optional_tables),
        project_service=ProjectService(projects_repo),
        item_service=ItemService(items_repo, optional_tables),
        lookup_service=LookupService(lookups_repo, optional_tables),
        time_tracking_service=TimeTrackingService(time_tracking_repo),
        desktop_service=DesktopService(desktop_repo, optional_tables),
        activity_service=ActivityService(activities_repo),
        health_service=HealthService(db, lifecycle),
    )
