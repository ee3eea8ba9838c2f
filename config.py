# config.py
"""
Runtime settings, read once from the environment (and a local .env file).
"""
import os
from dotenv import load_dotenv

load_dotenv()  # Loads .env into os.environ

SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')

# Document store
STORE_BACKEND = os.getenv('STORE_BACKEND', 'mongo').strip().lower()   # mongo | memory
MONGODB_URI = os.getenv('MONGODB_URI', 'mongodb://localhost:27017/')
MONGODB_DB = os.getenv('MONGODB_DB', 'pharmacy_db')
PHARMA_COLLECTION = os.getenv('PHARMA_COLLECTION', 'PharmaData')
MONGO_TIMEOUT_MS = int(os.getenv('MONGO_TIMEOUT_MS', '120000'))

# Backing documents and their array fields
MEDICINE_DOC = 'medicine'
MEDICINE_FIELD = 'medicines'
SALES_DOC = 'sales'
SALES_FIELD = 'orders'

# Logging
ERROR_LOG_FILE = os.getenv('ERROR_LOG_FILE', 'errors.log')
ERROR_LOG_TO_MONGO = os.getenv('ERROR_LOG_TO_MONGO', 'false').strip().lower() in ('1', 'true', 'yes')
AUDIT_LOG_FILE = os.getenv('AUDIT_LOG_FILE', 'audit.log')

PORT = int(os.getenv('PORT', 5000))
