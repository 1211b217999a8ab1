# /server/funcionalidades/turmas/regras.py

from datetime import datetime
import pytz
from . import config as module_config
from .banco import BancoTurmas

ORIGEM_AUTO = "auto"
ORIGEM_MANUAL = "manual"
STATUS_ADICIONADO = "added"
STATUS_REMOVIDO = "removed"


# --- Erros ---

class ErroTurmas(Exception):
    """Erro de validação mostrado ao staff como resposta efêmera."""

class CourseNotFound(ErroTurmas):
    def __init__(self, curso: str):
        super().__init__(f"Curso **{curso}** não encontrado. Use /cursos para ver a lista.")
        self.curso = curso

class NoCurrentClass(ErroTurmas):
    def __init__(self, mensagem: str = "Não tem turma atual aberta. Use /turma_abrir."):
        super().__init__(mensagem)

class ClassNotFound(ErroTurmas):
    def __init__(self, nome: str):
        super().__init__(f"Turma **{nome}** não encontrada.")
        self.nome = nome

class MemberNotResolvable(ErroTurmas):
    def __init__(self, membro_id):
        super().__init__(f"Membro com ID `{membro_id}` não encontrado no servidor.")
        self.membro_id = membro_id


# --- Funções Auxiliares ---

def agora_iso() -> str:
    return datetime.now(pytz.timezone(module_config.FUSO_HORARIO)).isoformat()

def cursos_ativos(aluno: dict) -> set:
    """O status de cada curso é o do último evento com aquele nome (ordem da lista)."""
    status = {}
    for evento in aluno.get("cursos", []):
        status[evento["nome"]] = evento["status"]
    return {nome for nome, st in status.items() if st == STATUS_ADICIONADO}

def curso_por_cargo(catalogo: dict, cargo_id: int):
    for nome, id_cargo in catalogo.items():
        if id_cargo == cargo_id:
            return nome
    return None

def _registrar_evento(aluno: dict, curso: str, origem: str, status: str, agora: str = None):
    aluno["cursos"].append({
        "nome": curso,
        "origem": origem,
        "status": status,
        "em": agora or agora_iso(),
    })


# --- Sincronização Automática por Cargo ---

def aplicar_mudanca_cargos(banco: BancoTurmas, membro_id, ganhos, perdidos, catalogo: dict,
                           id_cargo_aluno: int, tag: str = None, agora: str = None) -> bool:
    """
    Traduz os cargos ganhos/perdidos de um membro em registros de turma e curso.

    - Cargo de aluno ganho: garante o registro e, com turma aberta, coloca o
      membro na turma atual.
    - Cargo de curso ganho: registra 'added' se o curso não estiver ativo.
    - Cargo de curso perdido: registra 'removed' se o curso estiver ativo.
    - Cargos fora do catálogo são ignorados.

    Retorna True se o banco foi alterado.
    """
    alterado = False

    if id_cargo_aluno and id_cargo_aluno in ganhos:
        aluno = banco.garantir_aluno(membro_id, tag)
        alterado = True
        if banco.turma_aberta:
            nome_turma = banco.turma_atual
            turma = banco.dados["turmas"].setdefault(nome_turma, {"alunos": [], "criadaEm": agora or agora_iso()})
            if str(membro_id) not in turma["alunos"]:
                turma["alunos"].append(str(membro_id))
            aluno["turma"] = nome_turma

    for cargo_id in ganhos:
        curso = curso_por_cargo(catalogo, cargo_id)
        if not curso:
            continue
        aluno = banco.garantir_aluno(membro_id, tag)
        if curso not in cursos_ativos(aluno):
            _registrar_evento(aluno, curso, ORIGEM_AUTO, STATUS_ADICIONADO, agora)
            alterado = True

    for cargo_id in perdidos:
        curso = curso_por_cargo(catalogo, cargo_id)
        if not curso:
            continue
        aluno = banco.get_aluno(membro_id)
        if aluno and curso in cursos_ativos(aluno):
            if tag:
                aluno["tag"] = tag
            _registrar_evento(aluno, curso, ORIGEM_AUTO, STATUS_REMOVIDO, agora)
            alterado = True

    return alterado


# --- Comandos Manuais ---

def abrir_turma(banco: BancoTurmas, nome: str, agora: str = None) -> dict:
    banco.dados["turmaAtual"] = nome
    banco.dados["turmaAberta"] = True
    return banco.dados["turmas"].setdefault(nome, {"alunos": [], "criadaEm": agora or agora_iso()})

def fechar_turma(banco: BancoTurmas):
    # O nome da turma fica guardado para o /status continuar mostrando qual foi fechada
    banco.dados["turmaAberta"] = False
    return banco.turma_atual

def status_turma(banco: BancoTurmas):
    """Retorna (nome da turma atual, aberta, total de alunos)."""
    nome = banco.turma_atual
    turma = banco.turma(nome) if nome else None
    total = len(turma["alunos"]) if turma else 0
    return nome, banco.turma_aberta, total

def registrar_curso(banco: BancoTurmas, membro_id, curso: str, acao: str, catalogo: dict,
                    tag: str = None, agora: str = None) -> int:
    """
    Registra um curso manualmente, sem checar o status atual.

    acao: 'add' ou 'remove'. Retorna o ID do cargo do curso.
    """
    if curso not in catalogo:
        raise CourseNotFound(curso)
    status = STATUS_ADICIONADO if acao == "add" else STATUS_REMOVIDO
    aluno = banco.garantir_aluno(membro_id, tag)
    _registrar_evento(aluno, curso, ORIGEM_MANUAL, status, agora)
    return catalogo[curso]

def adicionar_aluno_turma(banco: BancoTurmas, membro_id, tag: str = None, agora: str = None) -> str:
    if not banco.turma_atual:
        raise NoCurrentClass()
    if not banco.turma_aberta:
        raise NoCurrentClass("Turma está fechada. Use /turma_abrir.")

    nome_turma = banco.turma_atual
    turma = banco.dados["turmas"].setdefault(nome_turma, {"alunos": [], "criadaEm": agora or agora_iso()})
    if str(membro_id) not in turma["alunos"]:
        turma["alunos"].append(str(membro_id))

    aluno = banco.garantir_aluno(membro_id, tag)
    aluno["turma"] = nome_turma
    return nome_turma

def remover_aluno_turma(banco: BancoTurmas, membro_id, tag: str = None) -> str:
    nome_turma = banco.turma_atual
    if not nome_turma:
        raise NoCurrentClass("Não tem turma atual.")
    turma = banco.turma(nome_turma)
    if turma is None:
        raise ClassNotFound(nome_turma)

    turma["alunos"] = [uid for uid in turma["alunos"] if uid != str(membro_id)]

    aluno = banco.garantir_aluno(membro_id, tag)
    if aluno.get("turma") == nome_turma:
        aluno["turma"] = None
    return nome_turma
