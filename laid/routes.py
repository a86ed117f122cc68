from flask import Blueprint, g, jsonify, request
from pydantic import ValidationError

from .auth import AuthService
from .database import get_db
from .discovery import DiscoveryService
from .matches import MatchService
from .messages import MessageService
from .middleware import require_auth
from .profiles import ProfileService
from .schemas import (
    LoginRequest, LogoutRequest, PhotoUploadRequest, ProfileUpdateRequest,
    RefreshTokenRequest, RegisterRequest, ResendVerificationRequest,
    SendMessageRequest, SwipeRequest, VerifyEmailRequest, parse_request,
)

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')
profile_bp = Blueprint('profile', __name__, url_prefix='/api/profile')
discovery_bp = Blueprint('discovery', __name__, url_prefix='/api/discovery')
match_bp = Blueprint('matches', __name__, url_prefix='/api/matches')
message_bp = Blueprint('messages', __name__, url_prefix='/api/messages')


def json_body():
    return request.get_json(silent=True)


# --- AUTH ---

@auth_bp.route('/register', methods=['POST'])
def register():
    data = parse_request(RegisterRequest, json_body())
    user = AuthService(get_db()).register_user(data.email, data.password)
    return jsonify({
        "message": "Registration successful. Please check your email to verify your account.",
        "userId": user.id,
    }), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = parse_request(LoginRequest, json_body())
    result = AuthService(get_db()).login(data.email, data.password)
    return jsonify(result.to_json()), 200


@auth_bp.route('/verify-email', methods=['POST'])
def verify_email():
    data = parse_request(VerifyEmailRequest, json_body())
    AuthService(get_db()).verify_email(data.token)
    return jsonify({"message": "Email verified successfully"}), 200


@auth_bp.route('/resend-verification', methods=['POST'])
def resend_verification():
    data = parse_request(ResendVerificationRequest, json_body())
    AuthService(get_db()).resend_verification(data.email)
    return jsonify({"message": "Verification email sent"}), 200


@auth_bp.route('/refresh-token', methods=['POST'])
def refresh_token():
    data = parse_request(RefreshTokenRequest, json_body())
    pair = AuthService(get_db()).refresh(data.user_id, data.refresh_token)
    return jsonify(pair.to_json()), 200


@auth_bp.route('/logout', methods=['POST'])
def logout():
    # Logout always succeeds; a malformed body just means nothing is revoked
    try:
        data = LogoutRequest.model_validate(json_body())
    except (ValidationError, TypeError):
        data = LogoutRequest()
    AuthService(get_db()).logout(data.user_id, data.refresh_token)
    return jsonify({"message": "Logout successful"}), 200


@auth_bp.route('/logout-all', methods=['POST'])
@require_auth
def logout_all():
    """Safety feature: sign out of every device"""
    revoked = AuthService(get_db()).logout_all(g.current_user_id)
    return jsonify({"message": "All sessions terminated.", "revoked": revoked}), 200


# --- PROFILE ---

@profile_bp.route('/me', methods=['GET'])
@require_auth
def get_my_profile():
    profile = ProfileService(get_db()).get_profile(g.current_user_id, g.current_user_id)
    return jsonify(profile.to_json()), 200


@profile_bp.route('/<user_id>', methods=['GET'])
@require_auth
def get_profile(user_id):
    profile = ProfileService(get_db()).get_profile(user_id, g.current_user_id)
    return jsonify(profile.to_json()), 200


@profile_bp.route('/me', methods=['PUT'])
@require_auth
def update_profile():
    data = parse_request(ProfileUpdateRequest, json_body())
    ProfileService(get_db()).update_profile(g.current_user_id, data)
    return jsonify({"message": "Profile updated successfully"}), 200


@profile_bp.route('/photos', methods=['POST'])
@require_auth
def upload_photo():
    data = parse_request(PhotoUploadRequest, json_body())
    photo = ProfileService(get_db()).add_photo(g.current_user_id, data)
    return jsonify(photo.to_json()), 201


# --- DISCOVERY ---

@discovery_bp.route('/feed', methods=['GET'])
@require_auth
def discovery_feed():
    profiles = DiscoveryService(get_db()).get_discovery_feed(g.current_user_id)
    return jsonify([profile.to_json() for profile in profiles]), 200


@discovery_bp.route('/swipe', methods=['POST'])
@require_auth
def swipe():
    data = parse_request(SwipeRequest, json_body())
    result = DiscoveryService(get_db()).swipe(g.current_user_id, data.swiped_id, data.direction)
    return jsonify(result.to_json(exclude_none=True)), 200


# --- MATCHES ---

@match_bp.route('', methods=['GET'])
@require_auth
def list_matches():
    matches = MatchService(get_db()).list_matches(g.current_user_id)
    return jsonify([match.to_json() for match in matches]), 200


@match_bp.route('/<match_id>', methods=['DELETE'])
@require_auth
def unmatch(match_id):
    MatchService(get_db()).unmatch(match_id, g.current_user_id)
    return jsonify({"message": "Unmatched successfully"}), 200


# --- MESSAGES ---

@message_bp.route('/<match_id>', methods=['GET'])
@require_auth
def get_messages(match_id):
    messages = MessageService(get_db()).list_messages(match_id, g.current_user_id)
    return jsonify([message.to_json() for message in messages]), 200


@message_bp.route('/<match_id>', methods=['POST'])
@require_auth
def send_message(match_id):
    service = MessageService(get_db())
    # Membership first, so outsiders get 403 whatever they send
    service.require_membership(match_id, g.current_user_id)
    data = parse_request(SendMessageRequest, json_body())
    message = service.send_message(match_id, g.current_user_id, data)
    return jsonify(message.to_json()), 201


blueprints = (auth_bp, profile_bp, discovery_bp, match_bp, message_bp)
