# /server/funcionalidades/turmas/exportar.py

import io
import pandas as pd
from .banco import BancoTurmas
from .regras import cursos_ativos


def registros_alunos(banco: BancoTurmas) -> list:
    records = []
    for discord_id, aluno in banco.dados["alunos"].items():
        records.append({
            "Discord ID": discord_id,
            "Tag": aluno.get("tag"),
            "Turma": aluno.get("turma"),
            "Cursos Ativos": ", ".join(sorted(cursos_ativos(aluno))),
            "Eventos": len(aluno.get("cursos", [])),
        })
    return records

def registros_eventos(banco: BancoTurmas) -> list:
    records = []
    for discord_id, aluno in banco.dados["alunos"].items():
        for evento in aluno.get("cursos", []):
            records.append({
                "Discord ID": discord_id,
                "Tag": aluno.get("tag"),
                "Curso": evento["nome"],
                "Status": evento["status"],
                "Origem": evento["origem"],
                "Em": evento["em"],
            })
    return records

def gerar_planilha(banco: BancoTurmas) -> io.BytesIO:
    """Gera o arquivo Excel com as abas 'Alunos' e 'Cursos'."""
    df_alunos = pd.DataFrame(registros_alunos(banco), columns=["Discord ID", "Tag", "Turma", "Cursos Ativos", "Eventos"])
    df_eventos = pd.DataFrame(registros_eventos(banco), columns=["Discord ID", "Tag", "Curso", "Status", "Origem", "Em"])

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='xlsxwriter') as writer:
        df_alunos.to_excel(writer, index=False, sheet_name='Alunos')
        df_eventos.to_excel(writer, index=False, sheet_name='Cursos')
    buffer.seek(0)
    return buffer
