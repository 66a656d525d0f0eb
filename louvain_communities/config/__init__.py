"""Configuration module."""
from .config import *
from .env import options_from_env, load_env_file, describe_options
