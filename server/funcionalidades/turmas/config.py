# /server/funcionalidades/turmas/config.py

import os
import discord

# --- MÓDULO DE TURMAS E CURSOS ---

def _id_env(nome: str) -> int:
    """Lê um ID do ambiente. Retorna 0 se a variável não existir."""
    valor = os.getenv(nome, "").strip()
    return int(valor) if valor.isdigit() else 0

# --- Arquivos ---
# O banco fica na pasta do módulo. TURMAS_DB_PATH sobrescreve o caminho completo.
NOME_ARQUIVO_DATABASE = "database.json"
CAMINHO_DATABASE = os.getenv("TURMAS_DB_PATH") or os.path.join(os.path.dirname(__file__), NOME_ARQUIVO_DATABASE)

# --- Canais e Cargos ---
# Coloque 0 para desativar.
ID_CARGO_ALUNO = _id_env("ROLE_ALUNO_ID")
ID_CANAL_TURMAS = _id_env("CHANNEL_TURMAS")   # Painel da turma + avisos de abertura/fechamento
ID_CANAL_CURSOS = _id_env("CHANNEL_CURSOS")   # Painel dos cursos

# --- Catálogo de Cursos ---
# Nome exibido -> ID do cargo. Cursos sem cargo configurado ficam de fora.
CURSOS = {
    nome: id_cargo
    for nome, id_cargo in {
        "FB":  _id_env("CURSO_FB"),
        "AP":  _id_env("CURSO_AP"),
        "SAT": _id_env("CURSO_SAT"),
        "OB":  _id_env("CURSO_OB"),
    }.items()
    if id_cargo
}

# --- Limites dos Painéis ---
LINHAS_POR_BLOCO = 40        # Máximo de alunos por campo da embed
MAX_CARACTERES_CAMPO = 1024  # Limite do Discord para o valor de um campo
MAX_BLOCOS = 5               # Campos de alunos no painel da turma
MAX_ALUNOS_POR_CURSO = 40    # Alunos listados por curso no painel de cursos

# --- Aparência ---
TITULO_PAINEL_TURMA = "📚 PAINEL DA TURMA"
TITULO_PAINEL_CURSOS = "🎓 PAINEL DE CURSOS"
COR_TURMA_ABERTA = discord.Color.green()
COR_TURMA_FECHADA = discord.Color.dark_grey()
COR_CURSOS = discord.Color.from_rgb(88, 101, 242)

# Fuso horário dos registros (Ex: 'America/Sao_Paulo')
FUSO_HORARIO = 'America/Sao_Paulo'
# ---------------------------------------------------------------------------------------
