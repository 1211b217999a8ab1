# /server/funcionalidades/turmas/banco.py

import json
import os


def documento_vazio() -> dict:
    return {
        "turmaAtual": None,
        "turmaAberta": False,
        "turmas": {},
        "alunos": {},
        "paineis": {"turma": None, "cursos": None},
    }


class BancoTurmas:
    """
    Documento JSON único com turmas, alunos e painéis.

    É carregado inteiro a cada evento e salvo inteiro depois de cada alteração.
    Não existe cache entre eventos: quem trata o evento carrega, altera e salva.
    """

    def __init__(self, caminho: str, dados: dict = None):
        self.caminho = caminho
        self.dados = dados if dados is not None else documento_vazio()
        # Documentos antigos podem não ter todas as chaves
        for chave, valor in documento_vazio().items():
            self.dados.setdefault(chave, valor)
        self.dados["paineis"].setdefault("turma", None)
        self.dados["paineis"].setdefault("cursos", None)

    @classmethod
    def carregar(cls, caminho: str) -> "BancoTurmas":
        if not os.path.exists(caminho):
            return cls(caminho)
        try:
            with open(caminho, 'r', encoding='utf-8') as f:
                return cls(caminho, json.load(f))
        except (json.JSONDecodeError, FileNotFoundError):
            return cls(caminho)

    def salvar(self):
        with open(self.caminho, 'w', encoding='utf-8') as f:
            json.dump(self.dados, f, indent=4, ensure_ascii=False)

    # --- Acesso ---

    @property
    def turma_atual(self):
        return self.dados["turmaAtual"]

    @property
    def turma_aberta(self) -> bool:
        return bool(self.dados["turmaAtual"]) and self.dados["turmaAberta"]

    def turma(self, nome: str):
        return self.dados["turmas"].get(nome)

    def get_aluno(self, membro_id):
        return self.dados["alunos"].get(str(membro_id))

    def garantir_aluno(self, membro_id, tag: str = None) -> dict:
        """Retorna o registro do aluno, criando se necessário. Atualiza a tag em cache."""
        aluno = self.dados["alunos"].setdefault(str(membro_id), {"tag": None, "turma": None, "cursos": []})
        if tag:
            aluno["tag"] = tag
        return aluno

    def get_painel(self, chave: str):
        return self.dados["paineis"].get(chave)

    def set_painel(self, chave: str, message_id):
        self.dados["paineis"][chave] = message_id
