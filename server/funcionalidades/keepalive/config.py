# /server/funcionalidades/keepalive/config.py

import os

# --- Keep-Alive (HTTP) ---
# Servidor HTTP mínimo para o monitor de saúde da hospedagem (Railway/Render).

HOST = "0.0.0.0"
PORTA = int(os.getenv("PORT") or 3000)

# Texto da rota "/"
TEXTO_RAIZ = "BOT UNI.PRF online ✅"
# ---------------------------------------------------------------------------------------
