import os

TOKEN = os.getenv("DISCORD_TOKEN")
CLIENT_ID = os.getenv("CLIENT_ID")
PREFIX = "!"

# Lista de funcionalidades (Cogs) a serem carregadas.
# O caminho é a partir da pasta principal, usando pontos em vez de barras.
MODULOS_ATIVOS = {
    'server.funcionalidades.turmas.turmas':       True,
    'server.funcionalidades.keepalive.keepalive': True,
}

# Nome para LOG
CONTEXTO = os.getenv("BOT_CONTEXTO", "BOT UNI.PRF") # Contexto global para os logs no console

# --- IDs de Configuração ---

# ID do servidor
ID_SERVIDOR = int(os.getenv("GUILD_ID") or 0)
# ---------------------------------------------------------------------------------------


class MissingConfiguration(RuntimeError):
    """Variáveis obrigatórias ausentes no ambiente."""


def validar_configuracao():
    faltando = []
    if not TOKEN:
        faltando.append("DISCORD_TOKEN")
    if not ID_SERVIDOR:
        faltando.append("GUILD_ID")
    if faltando:
        raise MissingConfiguration("Variáveis de ambiente ausentes: " + ", ".join(faltando))
