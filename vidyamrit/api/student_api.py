"""Student API - Presentation Layer (SoC)"""
from flask_restful import Resource

from vidyamrit.auth.auth_middleware import staff_required, get_current_user
from vidyamrit.exceptions.error_handler import handle_service_error
from vidyamrit.services.students.student_service import StudentService
from vidyamrit.utils.validation.input_validator import get_json_data, get_single_query_param


class StudentListResource(Resource):
    def __init__(self):
        self.student_service = StudentService()

    @staff_required
    def get(self):
        try:
            school_id = get_single_query_param("schoolId", required=False)
            result = self.student_service.get_students(get_current_user(), school_id)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @staff_required
    def post(self):
        try:
            data = get_json_data()
            result = self.student_service.create_student(data, get_current_user())
            return {"success": True, "data": result}, 201

        except Exception as e:
            return handle_service_error(e)


class ArchivedStudentListResource(Resource):
    def __init__(self):
        self.student_service = StudentService()

    @staff_required
    def get(self):
        try:
            school_id = get_single_query_param("schoolId", required=False)
            result = self.student_service.get_students(get_current_user(), school_id, archived=True)
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class StudentDetailResource(Resource):
    def __init__(self):
        self.student_service = StudentService()

    @staff_required
    def get(self, student_id):
        try:
            result = self.student_service.get_student(student_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @staff_required
    def put(self, student_id):
        try:
            data = get_json_data()
            result = self.student_service.update_student(student_id, data, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)

    @staff_required
    def delete(self, student_id):
        try:
            result = self.student_service.archive_student(student_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class StudentRestoreResource(Resource):
    def __init__(self):
        self.student_service = StudentService()

    @staff_required
    def post(self, student_id):
        try:
            result = self.student_service.restore_student(student_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)


class StudentLevelsResource(Resource):
    def __init__(self):
        self.student_service = StudentService()

    @staff_required
    def get(self, student_id):
        try:
            result = self.student_service.get_student_levels(student_id, get_current_user())
            return {"success": True, "data": result}, 200

        except Exception as e:
            return handle_service_error(e)
