import asyncio
import json

from birdeye_connectors.birdeye.report import TokenReport

SOL_MINT = "So11111111111111111111111111111111111111112"


async def main():

# Main pour tester la création d'un rapport de token Birdeye

    address = input(f"🪙 Adresse du token [{SOL_MINT} par défaut] : ").strip() or SOL_MINT

    print(f"\n⏳ Récupération asynchrone des données pour {address}...\n")

    data = await TokenReport.fetch(address)

    print(json.dumps(data, indent=2, ensure_ascii=False))


# --- Lancement compatible notebooks / PyCharm ---
try:
    loop = asyncio.get_running_loop()
except RuntimeError:
    loop = None

if loop and loop.is_running():
    import nest_asyncio
    nest_asyncio.apply()  # permet d'emboîter les loops
    asyncio.create_task(main())
else:
    asyncio.run(main())
