"""Firebase Cloud Messaging gateway"""
from typing import Dict, Any, Optional
import logging
import os

import firebase_admin
from firebase_admin import credentials, messaging

from app.config import settings

logger = logging.getLogger(__name__)


class FCMService:
    """Sends notifications to a single device token or to a topic"""

    def __init__(self, credentials_path: Optional[str] = None):
        self.credentials_path = credentials_path or settings.FCM_CREDENTIALS_PATH
        self._firebase_app = None

    def _get_firebase_app(self):
        """Initialize Firebase Admin SDK (lazy loading)"""
        if self._firebase_app is None:
            try:
                if not firebase_admin._apps:
                    # Check if credentials file exists
                    if os.path.exists(self.credentials_path):
                        cred = credentials.Certificate(self.credentials_path)
                        self._firebase_app = firebase_admin.initialize_app(
                            cred,
                            options={"httpTimeout": settings.HTTP_TIMEOUT_SECONDS},
                        )
                        logger.info("Firebase Admin SDK initialized successfully")
                    else:
                        logger.warning(f"FCM credentials file not found at {self.credentials_path}")
                        logger.info("Running in development mode - notifications will be logged only")
                else:
                    self._firebase_app = firebase_admin.get_app()

            except Exception as e:
                logger.error(f"Failed to initialize Firebase Admin SDK: {str(e)}")

        return self._firebase_app

    @staticmethod
    def format_data(data: Optional[Dict[str, Any]]) -> Dict[str, str]:
        """FCM data payloads only carry strings"""
        if not data:
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _send(self, target: str, message: messaging.Message, title: str, body: str) -> bool:
        app = self._get_firebase_app()

        # If Firebase is not initialized, just log
        if app is None:
            logger.info(f"[DEV MODE] Would send notification to {target}:")
            logger.info(f"  Title: {title}")
            logger.info(f"  Body: {body}")
            logger.info(f"  Data: {message.data}")
            return True

        try:
            message_id = messaging.send(message, app=app)
            logger.info(f"Sent notification to {target}: {message_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to send FCM notification to {target}: {str(e)}")
            return False

    def send_to_device(
        self,
        token: str,
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Send a notification to one device

        Args:
            token: FCM registration token
            title: Notification title
            body: Notification body
            data: Additional data payload, values are stringified

        Returns:
            True if the gateway accepted the message
        """
        message = messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            data=self.format_data(data),
            token=token,
        )
        return self._send(f"device {token[:16]}...", message, title, body)

    def send_to_topic(
        self,
        topic: str,
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Broadcast a notification to every device subscribed to a topic

        Returns:
            True if the gateway accepted the message
        """
        message = messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            data=self.format_data(data),
            topic=topic,
        )
        return self._send(f"topic {topic}", message, title, body)
