import os
from datetime import timedelta

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///arena.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Sessions: plain login lasts a week, "remember me" a month
    PERMANENT_SESSION_LIFETIME = timedelta(days=int(os.environ.get('SESSION_DAYS', '7')))
    REMEMBER_COOKIE_DURATION = timedelta(days=int(os.environ.get('REMEMBER_COOKIE_DAYS', '30')))
    SESSION_COOKIE_SAMESITE = 'Lax'
    # Game settings
    PD_TOTAL_ROUNDS = int(os.environ.get('PD_TOTAL_ROUNDS', '5'))
    DEFAULT_GAME_MODE = os.environ.get('DEFAULT_GAME_MODE', 'prisoners_dilemma')
    # Account rules
    USERNAME_MIN_LEN = int(os.environ.get('USERNAME_MIN_LEN', '2'))
    USERNAME_MAX_LEN = int(os.environ.get('USERNAME_MAX_LEN', '20'))
    PASSWORD_MIN_LEN = int(os.environ.get('PASSWORD_MIN_LEN', '4'))
    # Rows returned by the global leaderboard
    LEADERBOARD_LIMIT = int(os.environ.get('LEADERBOARD_LIMIT', '20'))
