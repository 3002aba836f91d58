"""Firebase Admin wiring: credentials loading and the auth client"""
import base64
import binascii
import json
import logging
import os

import firebase_admin
from firebase_admin import auth, credentials

from vidyamrit.config.settings import FirebaseConfig

logger = logging.getLogger(__name__)


def load_service_account():
    """
    Service account credentials, looked up in order:

    1. FIREBASE_SERVICE_ACCOUNT_KEY holding base64 or plain JSON
    2. FIREBASE_SERVICE_ACCOUNT_KEY_PATH relative to the working directory
    3. firebaseServiceAccountKey.json in the working directory
    """
    key_value = FirebaseConfig.SERVICE_ACCOUNT_KEY
    if key_value:
        key_value = key_value.strip()
        try:
            decoded = base64.b64decode(key_value, validate=True).decode("utf-8")
            if decoded.strip().startswith("{"):
                logger.info("Firebase service account loaded from base64-encoded environment variable.")
                return json.loads(decoded)
        except (binascii.Error, UnicodeDecodeError, ValueError):
            pass

        if key_value[:1] in ("'", '"') and key_value[-1:] == key_value[:1]:
            key_value = key_value[1:-1]
        try:
            account = json.loads(key_value)
        except ValueError:
            logger.error(f"Failed to parse FIREBASE_SERVICE_ACCOUNT_KEY (first 100 chars): {key_value[:100]}")
            raise ValueError(
                "Invalid FIREBASE_SERVICE_ACCOUNT_KEY in environment variable. "
                "Use base64-encoded JSON or properly escaped JSON string."
            )
        logger.info("Firebase service account loaded from environment variable.")
        return account

    path = os.path.join(os.getcwd(), FirebaseConfig.SERVICE_ACCOUNT_KEY_PATH or FirebaseConfig.DEFAULT_KEY_FILE)
    if not os.path.exists(path):
        logger.error(f"Service account file not found at path: {path}")
        raise FileNotFoundError(
            f"Service account file not found at path: {path}. "
            "Please set FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_KEY_PATH"
        )
    logger.info(f"Firebase service account loaded from file: {path}")
    return path


def initialize_firebase():
    """Initialize the default Firebase app once"""
    if firebase_admin._apps:
        return firebase_admin.get_app()
    cred = credentials.Certificate(load_service_account())
    app = firebase_admin.initialize_app(cred)
    logger.info("Firebase initialized successfully.")
    return app


def get_auth_client():
    """firebase_admin.auth bound to an initialized app (create_user, verify_id_token, delete_user)"""
    initialize_firebase()
    return auth
