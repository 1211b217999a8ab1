import asyncio
import os
from types import SimpleNamespace

import discord
import pytest

from config import config as global_config
from server.funcionalidades.turmas import config as module_config
from server.funcionalidades.turmas import regras, turmas
from server.funcionalidades.turmas.banco import BancoTurmas
from server.funcionalidades.turmas.regras import MemberNotResolvable
from server.funcionalidades.turmas.turmas import Turmas, resolver_membro, sincronizar_cargo

from conftest import CARGO_ALUNO, CARGO_AP, CARGO_FB, erro_http

ID_SERVIDOR = 4242


class FakeMembro:
    def __init__(self, guild, erro=None, membro_id=1, cargos=(), bot=False):
        self.guild = guild
        self.erro = erro
        self.id = membro_id
        self.mention = f"<@{membro_id}>"
        self.roles = [SimpleNamespace(id=cargo_id) for cargo_id in cargos]
        self.bot = bot
        self.adicionados = []
        self.removidos = []

    async def add_roles(self, cargo, reason=None):
        if self.erro:
            raise self.erro
        self.adicionados.append(cargo)

    async def remove_roles(self, cargo, reason=None):
        if self.erro:
            raise self.erro
        self.removidos.append(cargo)

    def __str__(self):
        return "membro#0001"


class FakeGuild:
    def __init__(self, cargos=None, membros=None, guild_id=ID_SERVIDOR):
        self.id = guild_id
        self.cargos = cargos or {}
        self.membros = membros or {}

    def get_role(self, cargo_id):
        return self.cargos.get(cargo_id)

    def get_member(self, membro_id):
        return self.membros.get(membro_id)

    async def fetch_member(self, membro_id):
        raise erro_http(discord.NotFound, 404, "Unknown Member")


CARGO = SimpleNamespace(id=101, name="FB")


def test_sincronizar_cargo_adiciona_e_remove():
    membro = FakeMembro(FakeGuild({101: CARGO}))
    assert asyncio.run(sincronizar_cargo(membro, 101, True, "teste")) == (True, None)
    assert asyncio.run(sincronizar_cargo(membro, 101, False, "teste")) == (True, None)
    assert membro.adicionados == [CARGO]
    assert membro.removidos == [CARGO]


def test_sincronizar_cargo_sem_permissao_retorna_erro():
    membro = FakeMembro(FakeGuild({101: CARGO}), erro=erro_http(discord.Forbidden, 403))
    sucesso, erro = asyncio.run(sincronizar_cargo(membro, 101, True, "teste"))
    assert sucesso is False
    assert "permissão" in erro


def test_sincronizar_cargo_inexistente():
    membro = FakeMembro(FakeGuild())
    sucesso, erro = asyncio.run(sincronizar_cargo(membro, 555, True, "teste"))
    assert sucesso is False
    assert "555" in erro


def test_sincronizar_cargo_nao_configurado():
    membro = FakeMembro(FakeGuild())
    assert asyncio.run(sincronizar_cargo(membro, 0, True, "teste")) == (True, None)
    assert membro.adicionados == []


def test_resolver_membro_do_cache():
    guild = FakeGuild()
    membro = FakeMembro(guild)
    guild.membros[5] = membro
    assert asyncio.run(resolver_membro(guild, 5)) is membro


def test_resolver_membro_fora_do_servidor():
    with pytest.raises(MemberNotResolvable) as exc:
        asyncio.run(resolver_membro(FakeGuild(), 5))
    assert exc.value.membro_id == 5


# --- Cog ---

class FakeCtx:
    def __init__(self, guild):
        self.guild = guild
        self.author = "staff#0001"
        self.respostas = []

    async def defer(self, ephemeral=False):
        pass

    async def send(self, texto=None, **kwargs):
        self.respostas.append(texto)


@pytest.fixture
def cog(tmp_path, monkeypatch, catalogo):
    caminho = str(tmp_path / "database.json")
    atualizacoes = []

    async def atualizar_paineis(bot, banco):
        atualizacoes.append(banco)

    monkeypatch.setattr(module_config, "CAMINHO_DATABASE", caminho)
    monkeypatch.setattr(module_config, "CURSOS", catalogo)
    monkeypatch.setattr(module_config, "ID_CARGO_ALUNO", CARGO_ALUNO)
    monkeypatch.setattr(global_config, "ID_SERVIDOR", ID_SERVIDOR)
    monkeypatch.setattr(turmas, "atualizar_paineis", atualizar_paineis)

    instancia = Turmas(bot=None)
    instancia.caminho = caminho
    instancia.atualizacoes = atualizacoes
    return instancia


def _eventos(caminho, membro_id=1):
    aluno = BancoTurmas.carregar(caminho).get_aluno(membro_id)
    return [(e["nome"], e["status"], e["origem"]) for e in aluno["cursos"]]


def test_on_member_update_registra_cursos_pela_diferenca_de_cargos(cog):
    guild = FakeGuild()
    sem_cargo = FakeMembro(guild)
    com_fb = FakeMembro(guild, cargos=[CARGO_FB])
    com_ap = FakeMembro(guild, cargos=[CARGO_AP])

    asyncio.run(cog.on_member_update(sem_cargo, com_fb))
    asyncio.run(cog.on_member_update(com_fb, com_ap))

    assert _eventos(cog.caminho) == [
        ("FB", "added", "auto"),
        ("AP", "added", "auto"),
        ("FB", "removed", "auto"),
    ]
    assert BancoTurmas.carregar(cog.caminho).get_aluno(1)["tag"] == "membro#0001"
    assert len(cog.atualizacoes) == 2


def test_on_member_update_cargo_de_aluno_entra_na_turma_aberta(cog):
    banco = BancoTurmas.carregar(cog.caminho)
    regras.abrir_turma(banco, "Turma 07")
    banco.salvar()
    guild = FakeGuild()

    asyncio.run(cog.on_member_update(FakeMembro(guild), FakeMembro(guild, cargos=[CARGO_ALUNO])))

    assert BancoTurmas.carregar(cog.caminho).turma("Turma 07")["alunos"] == ["1"]


def test_on_member_update_sem_mudanca_relevante_nao_salva(cog):
    guild = FakeGuild()

    asyncio.run(cog.on_member_update(FakeMembro(guild, cargos=[555]), FakeMembro(guild, cargos=[555])))
    asyncio.run(cog.on_member_update(FakeMembro(guild), FakeMembro(guild, cargos=[555])))

    assert not os.path.exists(cog.caminho)
    assert cog.atualizacoes == []


def test_on_member_update_ignora_bots_e_outros_servidores(cog):
    outro = FakeGuild(guild_id=1)
    asyncio.run(cog.on_member_update(FakeMembro(outro), FakeMembro(outro, cargos=[CARGO_FB])))

    guild = FakeGuild()
    asyncio.run(cog.on_member_update(FakeMembro(guild, bot=True), FakeMembro(guild, cargos=[CARGO_FB], bot=True)))

    assert not os.path.exists(cog.caminho)
    assert cog.atualizacoes == []


def test_alterar_curso_inexistente_nao_altera_o_arquivo(cog):
    banco = BancoTurmas.carregar(cog.caminho)
    regras.abrir_turma(banco, "Turma 07")
    banco.salvar()
    with open(cog.caminho, encoding="utf-8") as f:
        antes = f.read()

    guild = FakeGuild()
    guild.membros[1] = FakeMembro(guild)
    ctx = FakeCtx(guild)
    asyncio.run(cog._alterar_curso(ctx, SimpleNamespace(id=1), "Inexistente", "remove"))

    with open(cog.caminho, encoding="utf-8") as f:
        assert f.read() == antes
    assert ctx.respostas[0].startswith("❌")
    assert cog.atualizacoes == []


def test_alterar_curso_sem_permissao_para_o_cargo_mantem_o_registro(cog):
    guild = FakeGuild({CARGO_FB: SimpleNamespace(id=CARGO_FB, name="FB")})
    guild.membros[1] = FakeMembro(guild, erro=erro_http(discord.Forbidden, 403))
    ctx = FakeCtx(guild)

    asyncio.run(cog._alterar_curso(ctx, SimpleNamespace(id=1), "FB", "add"))

    assert _eventos(cog.caminho) == [("FB", "added", "manual")]
    assert ctx.respostas[0].startswith("✅")
    assert "⚠️" in ctx.respostas[0]
    assert len(cog.atualizacoes) == 1


def test_aluno_add_sem_cargo_configurado_nao_avisa(cog, monkeypatch):
    monkeypatch.setattr(module_config, "ID_CARGO_ALUNO", 0)
    banco = BancoTurmas.carregar(cog.caminho)
    regras.abrir_turma(banco, "Turma 07")
    banco.salvar()
    guild = FakeGuild()
    guild.membros[1] = FakeMembro(guild)
    ctx = FakeCtx(guild)

    asyncio.run(Turmas.aluno_add.callback(cog, ctx, SimpleNamespace(id=1)))

    assert BancoTurmas.carregar(cog.caminho).turma("Turma 07")["alunos"] == ["1"]
    assert "⚠️" not in ctx.respostas[0]
    assert guild.membros[1].adicionados == []
