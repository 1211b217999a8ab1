# /server/funcionalidades/turmas/turmas.py

import discord
from discord import app_commands
from discord.ext import commands
from datetime import datetime
from typing import Optional
from . import config as module_config
from . import regras
from .banco import BancoTurmas
from .regras import ErroTurmas, MemberNotResolvable
from .paineis import atualizar_paineis
from .exportar import gerar_planilha
from config import config as global_config


# --- Funções Auxiliares ---

def carregar_banco() -> BancoTurmas:
    return BancoTurmas.carregar(module_config.CAMINHO_DATABASE)

async def resolver_membro(guild: discord.Guild, membro_id: int) -> discord.Member:
    """Busca o membro no servidor (cache primeiro, depois API)."""
    membro = guild.get_member(membro_id)
    if membro:
        return membro
    try:
        return await guild.fetch_member(membro_id)
    except discord.HTTPException:
        raise MemberNotResolvable(membro_id)

async def sincronizar_cargo(membro: discord.Member, cargo_id: int, adicionar: bool, motivo: str):
    """
    Tenta dar/tirar um cargo do membro. O registro no banco já foi salvo antes,
    então uma falha aqui não desfaz nada: só é registrada e devolvida.

    Cargo não configurado (ID 0) não tem o que sincronizar e conta como sucesso.

    Retorna (sucesso, erro).
    """
    if not cargo_id:
        return True, None

    cargo = membro.guild.get_role(cargo_id)
    if not cargo:
        print(f"[{global_config.CONTEXTO}] ERRO (Turmas): Cargo com ID {cargo_id} não encontrado.")
        return False, f"Cargo com ID `{cargo_id}` não encontrado."

    try:
        if adicionar:
            await membro.add_roles(cargo, reason=motivo)
        else:
            await membro.remove_roles(cargo, reason=motivo)
        return True, None
    except discord.Forbidden:
        print(f"[{global_config.CONTEXTO}] ERRO (Turmas): Sem permissão para alterar o cargo '{cargo.name}' de {membro}.")
        return False, "Sem permissão para alterar o cargo (meu cargo pode estar abaixo dele)."
    except discord.HTTPException as e:
        print(f"[{global_config.CONTEXTO}] ERRO (Turmas): Falha ao alterar o cargo '{cargo.name}' de {membro}: {e}")
        return False, str(e)

def _aviso_sincronizacao(sucesso: bool, erro: Optional[str]) -> str:
    if sucesso:
        return ""
    return f"\n⚠️ Registro salvo, mas o cargo não foi sincronizado: {erro}"


# --- Cog Principal ---
class Turmas(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    async def anunciar(self, texto: str):
        """Envia um aviso no canal de turmas, se configurado."""
        if not module_config.ID_CANAL_TURMAS:
            return
        try:
            canal = self.bot.get_channel(module_config.ID_CANAL_TURMAS) or await self.bot.fetch_channel(module_config.ID_CANAL_TURMAS)
            await canal.send(texto)
        except discord.HTTPException as e:
            print(f"[{global_config.CONTEXTO}] ERRO (Turmas): Falha ao enviar aviso no canal de turmas: {e}")

    # --- Sincronização Automática por Cargo ---
    @commands.Cog.listener()
    async def on_member_update(self, before: discord.Member, after: discord.Member):
        if after.guild.id != global_config.ID_SERVIDOR or after.bot:
            return
        if before.roles == after.roles:
            return

        ids_antes = {role.id for role in before.roles}
        ids_depois = {role.id for role in after.roles}
        ganhos = ids_depois - ids_antes
        perdidos = ids_antes - ids_depois

        banco = carregar_banco()
        alterado = regras.aplicar_mudanca_cargos(
            banco, after.id, ganhos, perdidos,
            module_config.CURSOS, module_config.ID_CARGO_ALUNO, tag=str(after)
        )
        if not alterado:
            return

        banco.salvar()
        print(f"[{global_config.CONTEXTO}] Registro de {after} atualizado pela mudança de cargos.")
        await atualizar_paineis(self.bot, carregar_banco())

    # --- Comandos Gerais ---
    @commands.hybrid_command(name="ping", description="Teste do bot.")
    async def ping(self, ctx: commands.Context):
        await ctx.send("pong ✅", ephemeral=True)

    @commands.hybrid_command(name="status", description="Mostra a turma atual e se ela está aberta.")
    async def status(self, ctx: commands.Context):
        nome, aberta, total = regras.status_turma(carregar_banco())
        await ctx.send(
            f"📌 Turma atual: **{nome or 'Nenhuma'}**\n"
            f"📖 Turma aberta: **{'Sim' if aberta else 'Não'}**\n"
            f"👥 Alunos: **{total}**",
            ephemeral=True
        )

    @commands.hybrid_command(name="listar", description="Lista a turma atual e seus alunos.")
    async def listar(self, ctx: commands.Context):
        banco = carregar_banco()
        nome = banco.turma_atual
        if not nome:
            await ctx.send("❌ Não tem turma atual.", ephemeral=True)
            return

        turma = banco.turma(nome)
        ids = turma["alunos"] if turma else []
        lista = "\n".join(f"<@{uid}>" for uid in ids) if ids else "_Nenhum aluno ainda_"
        await ctx.send(f"📚 **Turma:** **{nome}**\n👥 **Alunos:**\n{lista}"[:2000])

    # --- Turmas ---
    @commands.hybrid_command(name="turma_abrir", description="Abre uma turma (cria se não existir).")
    @commands.has_permissions(manage_guild=True)
    @app_commands.describe(nome="Nome da turma.")
    async def turma_abrir(self, ctx: commands.Context, *, nome: str):
        await ctx.defer(ephemeral=True)
        banco = carregar_banco()
        regras.abrir_turma(banco, nome)
        banco.salvar()
        print(f"[{global_config.CONTEXTO}] Turma '{nome}' aberta por {ctx.author}.")

        await self.anunciar(f"✅ **Turma aberta:** **{nome}**\nUse /aluno_add para adicionar alunos.")
        await ctx.send(f"✅ Turma **{nome}** aberta!", ephemeral=True)
        await atualizar_paineis(self.bot, carregar_banco())

    @commands.hybrid_command(name="turma_fechar", description="Fecha a turma atual.")
    @commands.has_permissions(manage_guild=True)
    async def turma_fechar(self, ctx: commands.Context):
        await ctx.defer(ephemeral=True)
        banco = carregar_banco()
        nome = regras.fechar_turma(banco)
        banco.salvar()
        print(f"[{global_config.CONTEXTO}] Turma '{nome}' fechada por {ctx.author}.")

        await self.anunciar(f"🔒 **Turma fechada:** **{nome or 'Nenhuma'}**")
        await ctx.send("🔒 Turma fechada!", ephemeral=True)
        await atualizar_paineis(self.bot, carregar_banco())

    # --- Alunos ---
    @commands.hybrid_command(name="aluno_add", description="Adiciona um aluno na turma atual.")
    @commands.has_permissions(manage_roles=True)
    @app_commands.describe(membro="O aluno que será adicionado.")
    async def aluno_add(self, ctx: commands.Context, membro: discord.User):
        await ctx.defer(ephemeral=True)
        try:
            alvo = await resolver_membro(ctx.guild, membro.id)
            banco = carregar_banco()
            nome_turma = regras.adicionar_aluno_turma(banco, alvo.id, tag=str(alvo))
        except ErroTurmas as e:
            await ctx.send(f"❌ {e}", ephemeral=True)
            return
        banco.salvar()

        sucesso, erro = await sincronizar_cargo(alvo, module_config.ID_CARGO_ALUNO, True, f"Adicionado na turma {nome_turma} por {ctx.author}")
        await ctx.send(f"✅ {alvo.mention} adicionado na turma **{nome_turma}**.{_aviso_sincronizacao(sucesso, erro)}", ephemeral=True)
        await atualizar_paineis(self.bot, carregar_banco())

    @commands.hybrid_command(name="aluno_remover", description="Remove um aluno da turma atual.")
    @commands.has_permissions(manage_roles=True)
    @app_commands.describe(membro="O aluno que será removido.")
    async def aluno_remover(self, ctx: commands.Context, membro: discord.User):
        await ctx.defer(ephemeral=True)
        try:
            alvo = await resolver_membro(ctx.guild, membro.id)
            banco = carregar_banco()
            nome_turma = regras.remover_aluno_turma(banco, alvo.id, tag=str(alvo))
        except ErroTurmas as e:
            await ctx.send(f"❌ {e}", ephemeral=True)
            return
        banco.salvar()

        sucesso, erro = await sincronizar_cargo(alvo, module_config.ID_CARGO_ALUNO, False, f"Removido da turma {nome_turma} por {ctx.author}")
        await ctx.send(f"🗑️ {alvo.mention} removido da turma **{nome_turma}**.{_aviso_sincronizacao(sucesso, erro)}", ephemeral=True)
        await atualizar_paineis(self.bot, carregar_banco())

    @commands.hybrid_command(name="aluno", description="Mostra o registro de um aluno.")
    @app_commands.describe(membro="O aluno a consultar.")
    async def aluno(self, ctx: commands.Context, membro: discord.User):
        registro = carregar_banco().get_aluno(membro.id)
        if not registro:
            await ctx.send(f"❌ {membro.mention} não tem registro.", ephemeral=True)
            return

        ativos = sorted(regras.cursos_ativos(registro))
        embed = discord.Embed(title="🎓 Registro do Aluno", color=module_config.COR_CURSOS, timestamp=datetime.now())
        embed.set_thumbnail(url=membro.display_avatar.url)
        embed.add_field(name="Aluno", value=f"{membro.mention} ({registro.get('tag') or membro})", inline=False)
        embed.add_field(name="Turma", value=registro.get("turma") or "Nenhuma", inline=True)
        embed.add_field(name="Cursos Ativos", value=", ".join(ativos) if ativos else "Nenhum", inline=True)

        historico = [
            f"`{evento['em'][:16].replace('T', ' ')}` {'➕' if evento['status'] == regras.STATUS_ADICIONADO else '➖'} "
            f"**{evento['nome']}** ({evento['origem']})"
            for evento in registro.get("cursos", [])[-10:]
        ]
        embed.add_field(name="Histórico (últimos 10)", value="\n".join(historico) if historico else "*Vazio*", inline=False)
        embed.set_footer(text=f"ID do Aluno: {membro.id}")
        await ctx.send(embed=embed, ephemeral=True)

    # --- Cursos ---
    @commands.hybrid_command(name="cursos", description="Lista os cursos configurados.")
    async def cursos(self, ctx: commands.Context):
        if not module_config.CURSOS:
            await ctx.send("⚠️ Nenhum curso configurado.", ephemeral=True)
            return
        linhas = [f"• **{nome}** - <@&{cargo_id}>" for nome, cargo_id in module_config.CURSOS.items()]
        await ctx.send("📘 **Cursos disponíveis:**\n" + "\n".join(linhas), ephemeral=True)

    async def _alterar_curso(self, ctx: commands.Context, membro: discord.User, curso: str, acao: str):
        await ctx.defer(ephemeral=True)
        try:
            alvo = await resolver_membro(ctx.guild, membro.id)
            banco = carregar_banco()
            cargo_id = regras.registrar_curso(banco, alvo.id, curso, acao, module_config.CURSOS, tag=str(alvo))
        except ErroTurmas as e:
            await ctx.send(f"❌ {e}", ephemeral=True)
            return
        banco.salvar()

        adicionar = acao == "add"
        sucesso, erro = await sincronizar_cargo(alvo, cargo_id, adicionar, f"Curso {curso} {'registrado' if adicionar else 'removido'} por {ctx.author}")
        texto = f"✅ Curso **{curso}** registrado para {alvo.mention}." if adicionar else f"🗑️ Curso **{curso}** removido de {alvo.mention}."
        await ctx.send(texto + _aviso_sincronizacao(sucesso, erro), ephemeral=True)
        await atualizar_paineis(self.bot, carregar_banco())

    @commands.hybrid_command(name="curso_add", description="Registra um curso para um aluno.")
    @commands.has_permissions(manage_roles=True)
    @app_commands.describe(membro="O aluno.", curso="Nome do curso (veja /cursos).")
    async def curso_add(self, ctx: commands.Context, membro: discord.User, *, curso: str):
        await self._alterar_curso(ctx, membro, curso, "add")

    @commands.hybrid_command(name="curso_remover", description="Remove um curso de um aluno.")
    @commands.has_permissions(manage_roles=True)
    @app_commands.describe(membro="O aluno.", curso="Nome do curso (veja /cursos).")
    async def curso_remover(self, ctx: commands.Context, membro: discord.User, *, curso: str):
        await self._alterar_curso(ctx, membro, curso, "remove")

    # --- Painéis e Exportação ---
    @commands.hybrid_command(name="painel", description="Atualiza (ou recria) os painéis de turma e cursos.")
    @commands.has_permissions(manage_guild=True)
    async def painel(self, ctx: commands.Context):
        await ctx.defer(ephemeral=True)
        ok_turma, ok_cursos = await atualizar_paineis(self.bot, carregar_banco())
        await ctx.send(
            f"{'✅' if ok_turma else '❌'} Painel da turma\n"
            f"{'✅' if ok_cursos else '❌'} Painel de cursos",
            ephemeral=True
        )

    @commands.hybrid_command(name="exportar_turmas", description="Exporta alunos e cursos para um arquivo Excel.")
    @commands.has_permissions(manage_guild=True)
    async def exportar_turmas(self, ctx: commands.Context):
        await ctx.defer(ephemeral=True)
        banco = carregar_banco()
        if not banco.dados["alunos"]:
            await ctx.send("❌ Nenhum aluno registrado ainda.", ephemeral=True)
            return
        try:
            file = discord.File(gerar_planilha(banco), filename="turmas_export.xlsx")
            await ctx.send("✅ Aqui está o arquivo Excel com os dados das turmas:", file=file, ephemeral=True)
        except Exception as e:
            print(f"[{global_config.CONTEXTO}] Erro ao exportar turmas: {e}")
            await ctx.send(f"❌ Ocorreu um erro ao gerar o arquivo Excel: {e}", ephemeral=True)

    # --- Tratamento de Erros ---
    async def cog_command_error(self, ctx: commands.Context, error: commands.CommandError):
        if isinstance(error, commands.MissingPermissions):
            await ctx.send("❌ Você não tem permissão para usar este comando.", ephemeral=True)
        elif isinstance(error, commands.UserNotFound):
            await ctx.send("❌ Membro não encontrado.", ephemeral=True)
        elif isinstance(error, commands.BadArgument):
            await ctx.send("❌ Argumento inválido. Verifique se marcou o membro corretamente.", ephemeral=True)
        elif isinstance(error, commands.MissingRequiredArgument):
            await ctx.send(f"❌ Faltando argumento: `{error.param.name}`.", ephemeral=True)
        else:
            print(f"[{global_config.CONTEXTO}] ERRO (Turmas) no comando '{ctx.command}': {error}")
            await ctx.send(f"❌ Ocorreu um erro: {error}", ephemeral=True)


async def setup(bot):
    await bot.add_cog(Turmas(bot))
