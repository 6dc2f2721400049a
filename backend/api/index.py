import sys
import os

# Adiciona o diretório backend ao path para que os imports funcionem no Vercel
backend_dir = os.path.join(os.path.dirname(__file__), '..')
sys.path.insert(0, backend_dir)

from monitor_leads.main import app
