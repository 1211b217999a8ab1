# /server/funcionalidades/turmas/paineis.py

import discord
from datetime import datetime
from . import config as module_config
from .banco import BancoTurmas
from .regras import cursos_ativos
from config import config as global_config

CHAVE_PAINEL_TURMA = "turma"
CHAVE_PAINEL_CURSOS = "cursos"


def tag_aluno(banco: BancoTurmas, membro_id) -> str:
    aluno = banco.get_aluno(membro_id)
    if aluno and aluno.get("tag"):
        return aluno["tag"]
    return f"<@{membro_id}>"


# --- Montagem dos Painéis ---

def blocos_turma(banco: BancoTurmas, linhas_por_bloco: int = None, max_blocos: int = None,
                 max_caracteres: int = None):
    """
    Divide a lista de alunos da turma atual em blocos de texto.

    Um bloco fecha ao atingir `linhas_por_bloco` linhas ou quando a próxima linha
    passaria de `max_caracteres` (limite do valor de um campo da embed).

    Retorna (blocos, ocultos): a lista de blocos e quantos alunos ficaram de fora
    por causa do limite de blocos.
    """
    linhas_por_bloco = linhas_por_bloco or module_config.LINHAS_POR_BLOCO
    max_blocos = max_blocos or module_config.MAX_BLOCOS
    max_caracteres = max_caracteres or module_config.MAX_CARACTERES_CAMPO

    nome = banco.turma_atual
    turma = banco.turma(nome) if nome else None
    ids = turma["alunos"] if turma else []
    linhas = [f"• {tag_aluno(banco, uid)}"[:max_caracteres] for uid in ids]

    blocos = []
    atual = []
    tamanho = 0
    exibidos = 0
    for linha in linhas:
        # +1 pela quebra de linha entre as linhas do bloco
        extra = len(linha) + (1 if atual else 0)
        if atual and (len(atual) == linhas_por_bloco or tamanho + extra > max_caracteres):
            blocos.append("\n".join(atual))
            exibidos += len(atual)
            atual, tamanho, extra = [], 0, len(linha)
        if len(blocos) == max_blocos:
            break
        atual.append(linha)
        tamanho += extra
    else:
        if atual:
            blocos.append("\n".join(atual))
            exibidos += len(atual)

    return blocos, len(linhas) - exibidos

def alunos_por_curso(banco: BancoTurmas, catalogo: dict, limite: int = None) -> dict:
    """Curso -> (tags dos alunos ativos até o limite, total de ativos). Inclui cursos vazios."""
    limite = limite or module_config.MAX_ALUNOS_POR_CURSO
    resultado = {nome: [] for nome in catalogo}
    for membro_id, aluno in banco.dados["alunos"].items():
        for curso in cursos_ativos(aluno):
            if curso in resultado:
                resultado[curso].append(aluno.get("tag") or f"<@{membro_id}>")
    return {nome: (tags[:limite], len(tags)) for nome, tags in resultado.items()}

def montar_embed_turma(banco: BancoTurmas) -> discord.Embed:
    nome, aberta, total = banco.turma_atual, banco.turma_aberta, 0
    turma = banco.turma(nome) if nome else None
    if turma:
        total = len(turma["alunos"])

    embed = discord.Embed(
        title=module_config.TITULO_PAINEL_TURMA,
        color=module_config.COR_TURMA_ABERTA if aberta else module_config.COR_TURMA_FECHADA,
        timestamp=datetime.now()
    )
    if not nome:
        embed.description = "Nenhuma turma aberta no momento."
        return embed

    status = "🟢 Aberta" if aberta else "🔒 Fechada"
    embed.description = f"**Turma:** {nome}\n**Status:** {status}\n**Alunos:** {total}"

    blocos, ocultos = blocos_turma(banco)
    if not blocos:
        embed.add_field(name="👥 Alunos", value="*Nenhum aluno ainda.*", inline=False)
    for i, bloco in enumerate(blocos):
        titulo = "👥 Alunos" if len(blocos) == 1 else f"👥 Alunos (Parte {i+1}/{len(blocos)})"
        embed.add_field(name=titulo, value=bloco, inline=False)
    if ocultos:
        embed.add_field(name="⚠️ Lista truncada", value=f"... e mais {ocultos} aluno(s) não exibidos.", inline=False)

    embed.set_footer(text="Atualizado em")
    return embed

def montar_embed_cursos(banco: BancoTurmas, catalogo: dict) -> discord.Embed:
    embed = discord.Embed(
        title=module_config.TITULO_PAINEL_CURSOS,
        color=module_config.COR_CURSOS,
        timestamp=datetime.now()
    )
    if not catalogo:
        embed.description = "Nenhum curso configurado."
        return embed

    for curso, (tags, total) in alunos_por_curso(banco, catalogo).items():
        valor = "\n".join(f"• {tag}" for tag in tags) if tags else "*Nenhum aluno neste curso.*"
        embed.add_field(name=f"{curso} ({total})", value=valor[:module_config.MAX_CARACTERES_CAMPO], inline=False)

    embed.set_footer(text="Atualizado em")
    return embed


# --- Envio / Edição ---

async def _buscar_canal(bot, canal_id: int):
    canal = bot.get_channel(canal_id)
    if canal is None:
        canal = await bot.fetch_channel(canal_id)
    return canal

async def publicar_painel(bot, banco: BancoTurmas, chave: str, canal_id: int, embed: discord.Embed) -> bool:
    """
    Edita a mensagem do painel guardada no banco. Se ela não existir mais (ou nunca
    existiu), envia uma nova e guarda a ID para as próximas atualizações.

    A ID é lida e gravada no arquivo atual, não na cópia `banco` carregada no início
    do evento: outro evento pode ter salvo o documento enquanto este esperava o Discord.
    Só a chave do painel é alterada no disco.

    Retorna False quando o envio/edição falha. A falha só é registrada no console.
    """
    if not canal_id:
        return False

    try:
        canal = await _buscar_canal(bot, canal_id)
        message_id = BancoTurmas.carregar(banco.caminho).get_painel(chave) or banco.get_painel(chave)
        if message_id:
            try:
                mensagem = await canal.fetch_message(message_id)
                await mensagem.edit(embed=embed)
                return True
            except discord.NotFound:
                print(f"[{global_config.CONTEXTO}] Aviso (Turmas): Mensagem do painel '{chave}' não encontrada. Enviando uma nova.")

        mensagem = await canal.send(embed=embed)
        banco.set_painel(chave, mensagem.id)
        atual = BancoTurmas.carregar(banco.caminho)
        atual.set_painel(chave, mensagem.id)
        atual.salvar()
        return True
    except discord.Forbidden:
        print(f"[{global_config.CONTEXTO}] ERRO (Turmas): Sem permissão para publicar o painel '{chave}' no canal {canal_id}.")
    except discord.HTTPException as e:
        print(f"[{global_config.CONTEXTO}] ERRO (Turmas): Falha ao publicar o painel '{chave}': {e}")
    return False

async def atualizar_paineis(bot, banco: BancoTurmas, catalogo: dict = None):
    catalogo = module_config.CURSOS if catalogo is None else catalogo
    ok_turma = await publicar_painel(bot, banco, CHAVE_PAINEL_TURMA, module_config.ID_CANAL_TURMAS, montar_embed_turma(banco))
    ok_cursos = await publicar_painel(bot, banco, CHAVE_PAINEL_CURSOS, module_config.ID_CANAL_CURSOS, montar_embed_cursos(banco, catalogo))
    return ok_turma, ok_cursos
