from fastapi import APIRouter, Depends
from models import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from auth import get_current_principal, login_user, register_user, token_lifetime
from database import get_user_by_id
from errors import NotFound
from security import Principal

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _auth_response(message: str, user: dict, token: str) -> AuthResponse:
    return AuthResponse(
        message=message,
        access_token=token,
        expires_in=int(token_lifetime().total_seconds()),
        user=user,
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(request: RegisterRequest):
    """Register a patient or provider and return a JWT token"""
    profile = request.model_dump(exclude={"name", "email", "password", "role"}, exclude_none=True)
    user, token = register_user(request.name, request.email, request.password, request.role, **profile)
    return _auth_response("Registration successful", user, token)


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest):
    """Authenticate user and return JWT token"""
    user, token = login_user(request.email, request.password, request.role)
    return _auth_response("Login successful", user, token)


@router.get("/verify", response_model=UserResponse)
def verify(principal: Principal = Depends(get_current_principal)):
    """Confirm the token's identity still exists"""
    user = get_user_by_id(principal.subject_id)
    if not user:
        raise NotFound("User not found")
    return UserResponse(user=user)
