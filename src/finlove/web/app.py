"""FastAPI application.

``create_app`` takes an ``AppContext`` so tests can pass their own database
and collaborators. Each request works on its own database session.
"""

import dataclasses
import hmac
from datetime import date
from typing import Iterator, Optional

import structlog
from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from finlove.context import AppContext
from finlove.domain.errors import (
    AuthenticationError,
    ConflictError,
    DomainError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)
from finlove.domain.transaction import TransactionInput
from finlove.web.schemas import (
    CreateTransactionResponse,
    CronResponse,
    DeletedResponse,
    ForgotPasswordRequest,
    LoginRequest,
    PartnerLinkRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    TransactionCreate,
    TransactionOut,
    TransactionUpdate,
    UserOut,
)

logger = structlog.get_logger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    AuthenticationError: 401,
    NotFoundError: 404,
    ConflictError: 409,
    ExternalServiceError: 502,
}

bearer = HTTPBearer(auto_error=False)


def create_app(context: AppContext) -> FastAPI:
    """Build the HTTP application around an application context."""
    app = FastAPI(title="FinLove", version="0.3.0")

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
        status = next(
            (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 400
        )
        return JSONResponse(status_code=status, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("request_failed", path=request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    def request_context() -> Iterator[AppContext]:
        db = context.db.clone()
        try:
            yield dataclasses.replace(context, db=db)
        finally:
            db.disconnect()

    def current_user_id(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
        ctx: AppContext = Depends(request_context),
    ) -> int:
        token = credentials.credentials if credentials else request.cookies.get("token")
        if not token:
            raise AuthenticationError("Not authenticated")
        return ctx.auth_service().verify_token(token)

    # Rollover trigger
    @app.get("/api/cron", response_model=CronResponse)
    def run_cron(
        authorization: Optional[str] = Header(default=None),
        ctx: AppContext = Depends(request_context),
    ):
        secret = ctx.settings.cron_secret
        if secret and not hmac.compare_digest(authorization or "", f"Bearer {secret}"):
            return JSONResponse(status_code=401, content={"error": "Unauthorized"})

        try:
            result = ctx.rollover_service().run(
                date.today(),
                lookahead_days=ctx.settings.rollover_lookahead_days,
                max_iterations=ctx.settings.rollover_max_iterations,
            )
        except Exception:
            logger.exception("rollover_failed")
            return JSONResponse(status_code=500, content={"error": "Rollover failed"})

        return CronResponse(ok=True, **dataclasses.asdict(result))

    # Authentication
    @app.post("/api/auth/register", response_model=TokenResponse, status_code=201)
    def register(body: RegisterRequest, ctx: AppContext = Depends(request_context)):
        token, user = ctx.auth_service().register(body.name, body.email, body.password)
        return TokenResponse(token=token, user=UserOut.model_validate(user))

    @app.post("/api/auth/login", response_model=TokenResponse)
    def login(body: LoginRequest, ctx: AppContext = Depends(request_context)):
        token, user = ctx.auth_service().login(body.email, body.password)
        return TokenResponse(token=token, user=UserOut.model_validate(user))

    @app.post("/api/auth/forgot-password", status_code=202)
    def forgot_password(body: ForgotPasswordRequest, ctx: AppContext = Depends(request_context)):
        ctx.auth_service().forgot_password(body.email)
        return {"ok": True}

    @app.post("/api/auth/reset-password")
    def reset_password(body: ResetPasswordRequest, ctx: AppContext = Depends(request_context)):
        ctx.auth_service().reset_password(body.token, body.password)
        return {"ok": True}

    # Transactions
    @app.get("/api/transactions", response_model=list[TransactionOut])
    def list_transactions(
        start: Optional[date] = None,
        end: Optional[date] = None,
        user_id: int = Depends(current_user_id),
        ctx: AppContext = Depends(request_context),
    ):
        transactions = ctx.transaction_service().list_transactions(
            user_id, start_date=start, end_date=end
        )
        return [TransactionOut.model_validate(txn) for txn in transactions]

    @app.post("/api/transactions", response_model=CreateTransactionResponse, status_code=201)
    def create_transaction(
        body: TransactionCreate,
        user_id: int = Depends(current_user_id),
        ctx: AppContext = Depends(request_context),
    ):
        result = ctx.transaction_service().create_transaction(
            user_id, TransactionInput(**body.model_dump())
        )
        ctx.gamification_service().award_after_write(user_id)
        return CreateTransactionResponse(**dataclasses.asdict(result))

    @app.put("/api/transactions/{transaction_id}", response_model=TransactionOut)
    def update_transaction(
        transaction_id: int,
        body: TransactionUpdate,
        user_id: int = Depends(current_user_id),
        ctx: AppContext = Depends(request_context),
    ):
        fields = body.model_dump(exclude_unset=True)
        if "type" in fields:
            fields["transaction_type"] = fields.pop("type")
        txn = ctx.transaction_service().update_transaction(user_id, transaction_id, **fields)
        return TransactionOut.model_validate(txn)

    @app.delete("/api/transactions/{transaction_id}", response_model=DeletedResponse)
    def delete_transaction(
        transaction_id: int,
        user_id: int = Depends(current_user_id),
        ctx: AppContext = Depends(request_context),
    ):
        ctx.transaction_service().delete_transaction(user_id, transaction_id)
        return DeletedResponse(deleted=1)

    @app.delete("/api/transactions/group/{installment_id}", response_model=DeletedResponse)
    def delete_installment_group(
        installment_id: str,
        user_id: int = Depends(current_user_id),
        ctx: AppContext = Depends(request_context),
    ):
        count = ctx.transaction_service().delete_installment_group(user_id, installment_id)
        return DeletedResponse(deleted=count)

    # Partner
    @app.post("/api/partner/link", response_model=UserOut)
    def link_partner(
        body: PartnerLinkRequest,
        user_id: int = Depends(current_user_id),
        ctx: AppContext = Depends(request_context),
    ):
        partner = ctx.user_service().link_partner(user_id, body.email)
        ctx.gamification_service().award_after_write(user_id)
        return UserOut.model_validate(partner)

    @app.delete("/api/partner/link")
    def unlink_partner(
        user_id: int = Depends(current_user_id),
        ctx: AppContext = Depends(request_context),
    ):
        ctx.user_service().unlink_partner(user_id)
        return {"ok": True}

    return app
