"""Static tables: the built-in shop catalog and per-class starting values."""

from realm.models import CharacterClass, ItemRarity, ItemType, ShopItem


# --- Class starting values ---

# Setup-flow defaults for a fresh profile, before any attribute rolls
PROFILE_START_HEALTH = 100
PROFILE_START_GOLD = 100

CLASS_DESCRIPTIONS: dict[CharacterClass, str] = {
    CharacterClass.OCULTISTA: "Estudioso do paranormal, canaliza rituais e intelecto.",
    CharacterClass.ESPECIALISTA: "Perito versátil, resolve problemas com técnica e perícia.",
    CharacterClass.COMBATENTE: "Linha de frente, confia em força e vigor.",
}


# --- Shop catalog ---

DEFAULT_SHOP_ITEMS: list[ShopItem] = [
    # Weapons
    ShopItem(id="sword-iron", name="Espada de Ferro",
             description="Uma espada comum feita de ferro puro",
             type=ItemType.WEAPON, rarity=ItemRarity.COMMON, price=100, damage=5,
             effect="Dano: +5"),
    ShopItem(id="sword-steel", name="Espada de Aço",
             description="Uma arma bem equilibrada forjada em aço fino",
             type=ItemType.WEAPON, rarity=ItemRarity.UNCOMMON, price=250, damage=8,
             effect="Dano: +8"),
    ShopItem(id="dagger-venom", name="Punhal Envenenado",
             description="Lâmina fina untada com veneno paralisante",
             type=ItemType.WEAPON, rarity=ItemRarity.RARE, price=500, damage=6,
             effect="Paralisa inimigos por 2 turnos"),
    ShopItem(id="staff-arcane", name="Cajado Arcano",
             description="Uma varinha antiga que canaliza a magia primordial",
             type=ItemType.WEAPON, rarity=ItemRarity.EPIC, price=1500, damage=10,
             effect="Aumenta Inteligência em +3, Dano Mágico: +15"),
    # Armor
    ShopItem(id="armor-leather", name="Armadura de Couro",
             description="Proteção leve e flexível",
             type=ItemType.ARMOR, rarity=ItemRarity.COMMON, price=150, defense=3,
             effect="Defesa: +3"),
    ShopItem(id="armor-chain", name="Armadura de Malha",
             description="Proteção sólida em forma de anéis metálicos",
             type=ItemType.ARMOR, rarity=ItemRarity.UNCOMMON, price=350, defense=6,
             effect="Defesa: +6"),
    ShopItem(id="armor-plate", name="Armadura de Placas",
             description="Proteção pesada e resistente",
             type=ItemType.ARMOR, rarity=ItemRarity.RARE, price=800, defense=10,
             effect="Defesa: +10"),
    ShopItem(id="armor-mystical", name="Armadura Mística",
             description="Feita de um material raro que absorve magia",
             type=ItemType.ARMOR, rarity=ItemRarity.EPIC, price=2000, defense=12,
             effect="Defesa: +12, Resistência Mágica: +20%"),
    # Consumables
    ShopItem(id="potion-health-small", name="Poção de Cura Menor",
             description="Recupera 30 pontos de vida",
             type=ItemType.CONSUMABLE, rarity=ItemRarity.COMMON, price=50,
             effect="Cura: +30 HP"),
    ShopItem(id="potion-health-medium", name="Poção de Cura",
             description="Recupera 80 pontos de vida",
             type=ItemType.CONSUMABLE, rarity=ItemRarity.UNCOMMON, price=120,
             effect="Cura: +80 HP"),
    ShopItem(id="potion-mana", name="Frasco de Mana",
             description="Restaura 50 pontos de mana",
             type=ItemType.CONSUMABLE, rarity=ItemRarity.UNCOMMON, price=150,
             effect="Recupera: +50 Mana"),
    ShopItem(id="potion-strength", name="Elixir da Força",
             description="Aumenta força em +5 por 10 minutos",
             type=ItemType.CONSUMABLE, rarity=ItemRarity.RARE, price=300,
             effect="Força: +5 (10 min)"),
    ShopItem(id="potion-invincibility", name="Poção da Invencibilidade",
             description="Torna o usuário invulnerável por 1 minuto",
             type=ItemType.CONSUMABLE, rarity=ItemRarity.EPIC, price=1000,
             effect="Invulnerabilidade: 60s"),
    # Special items
    ShopItem(id="crystal-mana", name="Cristal de Mana",
             description="Uma gema brilhante que contém energia mágica pura",
             type=ItemType.OTHER, rarity=ItemRarity.RARE, price=400,
             effect="Componente alquímico"),
    ShopItem(id="rune-strength", name="Runa de Força",
             description="Uma runa antiga que concede poder bruto",
             type=ItemType.OTHER, rarity=ItemRarity.EPIC, price=750,
             effect="Aumenta Força permanentemente em +2"),
]
