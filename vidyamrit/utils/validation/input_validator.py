"""Centralized request input helpers - DRY Implementation"""
from flask import request


def get_json_data():
    """Centralized JSON parsing"""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def get_optional_query_params(**param_defaults):
    """Get optional query parameters with defaults"""
    params = {}

    for param, default in param_defaults.items():
        params[param] = request.args.get(param, default)

    return params


def get_single_query_param(param_name, required=True):
    """Get single query parameter with validation"""
    value = request.args.get(param_name)

    if required and not value:
        raise ValueError(f"Missing required parameter: {param_name}")

    return value
