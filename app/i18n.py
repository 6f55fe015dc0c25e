import json
import os
import structlog
from flask import request, has_request_context

from constants import TRANSLATIONS_DIR
from media_types import SUPPORTED_LOCALES, DEFAULT_LOCALE

logger = structlog.get_logger('i18n')


class I18n:
    def __init__(self, app=None):
        self.translations = {}
        self.default_locale = DEFAULT_LOCALE
        if app:
            self.init_app(app)

    def init_app(self, app):
        self.app = app
        self.load_translations()
        app.extensions['i18n'] = self

    def load_translations(self):
        if not os.path.exists(TRANSLATIONS_DIR):
            return

        for filename in os.listdir(TRANSLATIONS_DIR):
            if filename.endswith('.json'):
                locale = filename[:-5]
                try:
                    with open(os.path.join(TRANSLATIONS_DIR, filename), 'r', encoding='utf-8') as f:
                        self.translations[locale] = json.load(f)
                except (OSError, ValueError) as e:
                    logger.error(f"Error loading translation {filename}: {e}")

    def _ensure_loaded(self):
        if not self.translations:
            self.load_translations()

    def get_locale(self):
        self._ensure_loaded()
        if not has_request_context():
            return self.default_locale

        # 1. Check for language cookie
        cookie_lang = request.cookies.get('language')
        if cookie_lang and cookie_lang in self.translations:
            return cookie_lang

        # 2. Try best match from headers
        best_match = request.accept_languages.best_match(SUPPORTED_LOCALES)
        return best_match or self.default_locale

    def t(self, key, locale=None, **params):
        self._ensure_loaded()
        if locale not in self.translations:
            locale = self.get_locale()
        # Fallback to default if key missing in locale
        text = self.translations.get(locale, {}).get(key, self.translations.get(self.default_locale, {}).get(key, key))
        if params:
            try:
                return text.format(**params)
            except (KeyError, IndexError):
                logger.warning(f"Missing parameter for translation {key} ({locale})")
        return text


i18n = I18n()
