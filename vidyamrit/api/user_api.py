"""User API - Presentation Layer (SoC)"""
from flask_restful import Resource

from vidyamrit.auth.auth_middleware import token_required, admin_required, super_admin_required, get_current_user
from vidyamrit.exceptions.error_handler import handle_service_error
from vidyamrit.services.users.user_service import UserService, format_user
from vidyamrit.utils.validation.input_validator import get_json_data, get_optional_query_params


class UserRegisterResource(Resource):
    def __init__(self):
        self.user_service = UserService()

    @admin_required
    def post(self):
        try:
            data = get_json_data()
            result = self.user_service.register_user(data)
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class CurrentUserResource(Resource):
    @token_required
    def get(self):
        return {"success": True, "data": format_user(get_current_user())}, 200


class UserListResource(Resource):
    def __init__(self):
        self.user_service = UserService()

    @token_required
    def get(self):
        try:
            params = get_optional_query_params(role=None, schoolId=None)
            result = self.user_service.get_users(params["role"], params["schoolId"])
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class UserDetailResource(Resource):
    def __init__(self):
        self.user_service = UserService()

    @token_required
    def get(self, user_id):
        try:
            result = self.user_service.get_user(user_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @token_required
    def put(self, user_id):
        try:
            data = get_json_data()
            result = self.user_service.update_user(user_id, data)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @super_admin_required
    def delete(self, user_id):
        try:
            result = self.user_service.delete_user(user_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)
