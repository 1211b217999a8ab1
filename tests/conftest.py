from types import SimpleNamespace

import discord
import pytest

from server.funcionalidades.turmas.banco import BancoTurmas

CARGO_ALUNO = 900
CARGO_FB = 101
CARGO_AP = 102


@pytest.fixture
def catalogo():
    return {"FB": CARGO_FB, "AP": CARGO_AP}


@pytest.fixture
def banco(tmp_path):
    return BancoTurmas.carregar(str(tmp_path / "database.json"))


def erro_http(classe, status, texto="erro"):
    return classe(SimpleNamespace(status=status, reason=texto), texto)


class FakeMensagem:
    def __init__(self, message_id, embed=None):
        self.id = message_id
        self.embed = embed
        self.edicoes = 0

    async def edit(self, embed=None):
        self.embed = embed
        self.edicoes += 1


class FakeCanal:
    def __init__(self, proibido=False):
        self.mensagens = {}
        self.enviadas = []
        self.proibido = proibido
        self._proximo_id = 5000

    async def fetch_message(self, message_id):
        if message_id not in self.mensagens:
            raise erro_http(discord.NotFound, 404, "Unknown Message")
        return self.mensagens[message_id]

    async def send(self, texto=None, embed=None):
        if self.proibido:
            raise erro_http(discord.Forbidden, 403, "Missing Permissions")
        self._proximo_id += 1
        mensagem = FakeMensagem(self._proximo_id, embed)
        self.mensagens[mensagem.id] = mensagem
        self.enviadas.append(texto or embed)
        return mensagem


class FakeBot:
    def __init__(self, canais):
        self.canais = canais

    def get_channel(self, canal_id):
        return self.canais.get(canal_id)

    async def fetch_channel(self, canal_id):
        raise erro_http(discord.NotFound, 404, "Unknown Channel")
