import discord
from discord.ext import commands
import asyncio
import sys
from dotenv import load_dotenv

# Carrega as variáveis de ambiente do arquivo .env
load_dotenv()

# Agora o 'config' pode ser importado, pois as variáveis já estão no ambiente
from config import config

class TurmasBot(commands.Bot):
    def __init__(self):
        intents = discord.Intents.all()
        super().__init__(
            command_prefix=config.PREFIX,
            intents=intents,
            application_id=int(config.CLIENT_ID) if config.CLIENT_ID else None
        )

    async def setup_hook(self):
        """Este hook é chamado automaticamente antes do bot logar."""
        print("--- Carregando funcionalidades (Cogs) ---")

        for extension, is_active in config.MODULOS_ATIVOS.items():
            if is_active:
                try:
                    await self.load_extension(extension)
                    print(f"✅ Módulo '{extension}' carregado com sucesso.")
                except Exception as e:
                    print(f"❌ Falha ao carregar o módulo '{extension}': {e}")
            else:
                print(f"⚪ Módulo '{extension}' desativado na configuração.")

        print("--- Sincronizando comandos de barra ---")
        # Registra os comandos direto no servidor, a propagação é imediata
        guild = discord.Object(id=config.ID_SERVIDOR)
        self.tree.copy_global_to(guild=guild)
        await self.tree.sync(guild=guild)
        print("✅ Comandos de barra sincronizados.")
        print("-----------------------------------------")

    async def on_ready(self):
        print(f'--- Bot conectado como {self.user} ---')

async def main():
    try:
        config.validar_configuracao()
    except config.MissingConfiguration as e:
        print(f"❌ ERRO CRÍTICO: {e}")
        print("Certifique-se de que o arquivo .env existe e contém as variáveis DISCORD_TOKEN e GUILD_ID.")
        sys.exit(1)

    bot = TurmasBot()
    async with bot:
        await bot.start(config.TOKEN)

if __name__ == "__main__":
    asyncio.run(main())
