# /server/funcionalidades/keepalive/keepalive.py

import time
from aiohttp import web
from discord.ext import commands
from . import config as module_config
from config import config as global_config


def criar_app() -> web.Application:
    app = web.Application()

    async def raiz(_):
        return web.Response(text=module_config.TEXTO_RAIZ)

    async def health(_):
        return web.json_response({"ok": True, "ts": int(time.time() * 1000)})

    app.router.add_get("/", raiz)
    app.router.add_get("/health", health)
    return app


class KeepAlive(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.runner = None

    async def cog_load(self):
        self.runner = web.AppRunner(criar_app())
        await self.runner.setup()
        site = web.TCPSite(self.runner, module_config.HOST, module_config.PORTA)
        await site.start()
        print(f"[{global_config.CONTEXTO}] 🌐 Keep-alive na porta {module_config.PORTA}")

    async def cog_unload(self):
        if self.runner:
            await self.runner.cleanup()
            self.runner = None


async def setup(bot):
    await bot.add_cog(KeepAlive(bot))
