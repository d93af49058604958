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

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.exception.exception import DiscordError, UserException, ValidationFailed

logger = logging.getLogger("server_exception_handler")


async def user_exception_handler(request: Request, e: UserException):
    return JSONResponse(status_code=400, content={"code": e.code, "text": e.description})


async def discord_exception_handler(request: Request, e: DiscordError):
    logger.warning(
        "Discord integration error",
        extra={
            "path": request.url.path,
            "error": type(e).__name__,
            "error_message": str(e),
            "upstream_status": e.status,
            "upstream_body": e.body,
        },
    )
    content: dict = {"code": e.error_code, "text": e.user_message}
    if isinstance(e, ValidationFailed):
        content["reason"] = e.reason.value
    return JSONResponse(status_code=e.http_status, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UserException, user_exception_handler)
    app.add_exception_handler(DiscordError, discord_exception_handler)
