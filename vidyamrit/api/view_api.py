"""Stakeholder View API - Presentation Layer (SoC)"""
from flask_restful import Resource

from vidyamrit.auth.auth_middleware import token_required, super_admin_required, get_current_user
from vidyamrit.exceptions.error_handler import handle_service_error
from vidyamrit.services.views.view_service import ViewService
from vidyamrit.utils.validation.input_validator import get_json_data


class ViewListResource(Resource):
    def __init__(self):
        self.view_service = ViewService()

    @super_admin_required
    def get(self):
        try:
            result = self.view_service.get_views()
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @super_admin_required
    def post(self):
        try:
            data = get_json_data()
            result = self.view_service.create_view(data, get_current_user())
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class MyViewResource(Resource):
    def __init__(self):
        self.view_service = ViewService()

    @token_required
    def get(self):
        try:
            result = self.view_service.get_my_view(get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class MyViewDataResource(Resource):
    def __init__(self):
        self.view_service = ViewService()

    @token_required
    def get(self):
        try:
            result = self.view_service.get_my_view_data(get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ViewDetailResource(Resource):
    def __init__(self):
        self.view_service = ViewService()

    @token_required
    def get(self, view_id):
        try:
            result = self.view_service.get_view(view_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @super_admin_required
    def put(self, view_id):
        try:
            data = get_json_data()
            result = self.view_service.update_view(view_id, data)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @super_admin_required
    def delete(self, view_id):
        try:
            result = self.view_service.delete_view(view_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ViewDataResource(Resource):
    def __init__(self):
        self.view_service = ViewService()

    @token_required
    def get(self, view_id):
        try:
            result = self.view_service.get_view_data(view_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class ViewActivateResource(Resource):
    def __init__(self):
        self.view_service = ViewService()

    @super_admin_required
    def put(self, view_id):
        try:
            data = get_json_data()
            result = self.view_service.set_active(view_id, data)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)
