# ========= Copyright 2025-2026 @ Hanggent.AI All Rights Reserved. =========
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ========= Copyright 2025-2026 @ Hanggent.AI All Rights Reserved. =========


import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.component.database import init_db
from app.component.discord_client import DiscordDirectoryClient
from app.component.environment import get_config
from app.exception.handler import register_exception_handlers
from app.service.discord_reconciler_service import DiscordIntegrationReconciler

logger = logging.getLogger("server_main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Server startup/shutdown lifecycle."""
    config = get_config()
    init_db()
    if not config.discord.is_configured:
        logger.warning("Discord bot token or guild id missing; Discord routes will be unavailable")

    client = DiscordDirectoryClient.from_config(config.discord)
    app.state.discord_reconciler = DiscordIntegrationReconciler(client, application_id=config.discord.application_id)
    try:
        yield
    finally:
        await client.close()


def create_app(prefix: str = "") -> FastAPI:
    from app.controller.health_controller import router as health_router
    from app.controller.integration.discord_controller import router as discord_router

    app = FastAPI(
        swagger_ui_parameters={"persistAuthorization": True},
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    app.include_router(health_router, prefix=prefix)
    app.include_router(discord_router, prefix=prefix)
    return app
