from typing import Annotated, Callable

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    HTTPException,
    Query,
    Security,
    status,
)
from fastapi.security import (
    HTTPAuthorizationCredentials,
    HTTPBasic,
    HTTPBasicCredentials,
    HTTPBearer,
)

from portal.application.emails import MailContext, deliver
from portal.application.login_user import current_user, login_user, logout_user
from portal.application.password_reset import request_password_reset, reset_password
from portal.application.register_user import register_user
from portal.application.resend_verification import resend_verification
from portal.application.verify_email import verify_email
from portal.domain.errors import (
    EmailNotVerified,
    InvalidCredentials,
    InvalidOrExpiredToken,
    UserAlreadyExists,
    UserNotFound,
)
from portal.domain.ports.email_port import EmailPort
from portal.domain.ports.session_store import SessionStorePort
from portal.domain.ports.unit_of_work import UnitOfWorkPort
from portal.presentation.dependencies import (
    get_email_port,
    get_hash_password,
    get_mail_context,
    get_sessions,
    get_uow,
    get_verify_password,
)
from portal.presentation.rate_limit import rate_limit
from portal.schemas.requests import TOKEN_PATTERN, EmailIn, RegisterIn, ResetPasswordIn
from portal.schemas.responses import (
    FORGOT_MESSAGE,
    RESEND_MESSAGE,
    MeOut,
    MessageOut,
    RegisteredOut,
    TokenOut,
)

router = APIRouter(prefix="/auth", tags=["Auth"])
security = HTTPBasic()
bearer_scheme = HTTPBearer()

INVALID_TOKEN = "Invalid or expired token"


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisteredOut,
    dependencies=[Depends(rate_limit("register"))],
)
async def post_register(
    body: RegisterIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    email_port: Annotated[EmailPort, Depends(get_email_port)],
    mail: Annotated[MailContext, Depends(get_mail_context)],
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
):
    try:
        result = await register_user(
            uow=uow,
            email_port=email_port,
            mail=mail,
            email=body.email,
            password=body.password,
            hash_password=hash_password,
            name=body.name,
        )
    except UserAlreadyExists:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="An account with this email already exists",
        )

    if not result.email_sent:
        return RegisteredOut(
            message=(
                "Account created but verification email could not be sent. "
                "Please try resending from the login page."
            ),
            user_id=result.user_id,
            email_failed=True,
        )
    return RegisteredOut(
        message="Account created successfully. Please check your email to verify your account.",
        user_id=result.user_id,
    )


@router.post(
    "/resend-verification",
    response_model=MessageOut,
    dependencies=[Depends(rate_limit("resend_verification"))],
)
async def post_resend_verification(
    body: EmailIn,
    background_tasks: BackgroundTasks,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    email_port: Annotated[EmailPort, Depends(get_email_port)],
    mail: Annotated[MailContext, Depends(get_mail_context)],
):
    outgoing = await resend_verification(uow=uow, mail=mail, email=body.email)
    # sent after the response so known and unknown emails answer alike
    if outgoing is not None:
        background_tasks.add_task(deliver, email_port, outgoing)
    return MessageOut(message=RESEND_MESSAGE)


@router.get(
    "/verify-email",
    response_model=MessageOut,
    dependencies=[Depends(rate_limit("verify_email"))],
)
async def get_verify_email(
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    token: str = Query(..., pattern=TOKEN_PATTERN),
):
    try:
        await verify_email(uow=uow, token=token)
    except InvalidOrExpiredToken:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_TOKEN)
    return MessageOut(message="Email verified successfully")


@router.post(
    "/forgot-password",
    response_model=MessageOut,
    dependencies=[Depends(rate_limit("forgot_password"))],
)
async def post_forgot_password(
    body: EmailIn,
    background_tasks: BackgroundTasks,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    email_port: Annotated[EmailPort, Depends(get_email_port)],
    mail: Annotated[MailContext, Depends(get_mail_context)],
):
    outgoing = await request_password_reset(uow=uow, mail=mail, email=body.email)
    if outgoing is not None:
        background_tasks.add_task(deliver, email_port, outgoing)
    return MessageOut(message=FORGOT_MESSAGE)


@router.post(
    "/reset-password",
    response_model=MessageOut,
    dependencies=[Depends(rate_limit("login"))],
)
async def post_reset_password(
    body: ResetPasswordIn,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
):
    try:
        await reset_password(
            uow=uow, token=body.token, password=body.password, hash_password=hash_password
        )
    except InvalidOrExpiredToken:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_TOKEN)
    except UserNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return MessageOut(message="Password reset successfully")


@router.post(
    "/login",
    response_model=TokenOut,
    dependencies=[Depends(rate_limit("login"))],
)
async def post_login(
    creds: HTTPBasicCredentials = Depends(security),
    uow: UnitOfWorkPort = Depends(get_uow),
    sessions: SessionStorePort = Depends(get_sessions),
    verify_password: Callable[[str, str | None], bool] = Depends(get_verify_password),
):
    try:
        token = await login_user(
            uow=uow,
            sessions=sessions,
            email=creds.username,
            password=creds.password,
            verify_password=verify_password,
        )
    except InvalidCredentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid credentials"
        )
    except EmailNotVerified:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="email not verified"
        )
    return TokenOut(token=token)


@router.get("/me", response_model=MeOut)
async def get_me(
    auth: HTTPAuthorizationCredentials = Security(bearer_scheme),
    uow: UnitOfWorkPort = Depends(get_uow),
    sessions: SessionStorePort = Depends(get_sessions),
):
    user = await current_user(uow=uow, sessions=sessions, token=auth.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid or expired token"
        )
    return MeOut(
        id=user.id, email=user.email, name=user.name, email_verified=user.email_verified
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def post_logout(
    auth: HTTPAuthorizationCredentials = Security(bearer_scheme),
    sessions: SessionStorePort = Depends(get_sessions),
):
    await logout_user(sessions=sessions, token=auth.credentials)
