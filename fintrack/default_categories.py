"""Category taxonomy seeded into every newly provisioned tenant."""

DEFAULT_CATEGORIES: list[dict] = [
    {
        "name": "Comestibles",
        "color": "#FF6384",
        "subcategories": ["Panaderia", "Supermercados", "Carniceria", "Verduleria", "Kioscos", "Pescaderia", "Delivery", "Otros"],
    },
    {
        "name": "Consumibles",
        "color": "#36A2EB",
        "subcategories": ["Ferreteria", "Muebles"],
    },
    {
        "name": "Educacion",
        "color": "#FFCE56",
        "subcategories": ["Colegio", "Universidad", "Material Estudiantil", "Libros", "Fotocopias", "Cursos y talleres", "Apoyos", "Otros"],
    },
    {
        "name": "Familiares",
        "color": "#4BC0C0",
        "subcategories": ["Regalos", "Cuidado de niños", "Fiestas", "Otros"],
    },
    {
        "name": "Gastos Financieros",
        "color": "#9966FF",
        "subcategories": ["Cuotas Prestamos personales", "Cuotas Creditos", "Tarjeta de Credito", "Inversiones", "Aportes Planes de Retiro", "Servicios Bancarios", "Caja de Seguridad", "Otros"],
    },
    {
        "name": "Mascotas",
        "color": "#FF9F40",
        "subcategories": ["Alimentos", "Medicamentos", "Veterinaria", "Juguetes", "Paseadores", "Otros"],
    },
    {
        "name": "Mobilidad",
        "color": "#E7E9ED",
        "subcategories": ["Patente", "Seguros", "Combustibles", "Mantenimiento", "Taxis | Uber | Cabify | Didi", "SUBE", "Peajes", "Estacionamiento", "Otros"],
    },
    {
        "name": "Ropa y Accesorios",
        "color": "#537bc4",
        "subcategories": ["Ropa", "Calzado", "Joyeria", "Limpieza en Seco", "Otros"],
    },
    {
        "name": "Salud y Bienestar",
        "color": "#f67019",
        "subcategories": ["Seguro Medico", "Farmacia", "Consultas Medicas", "Odontologia", "Gimnasio", "Cuota Club", "Peluqueria", "Cuidado Personal", "Otros"],
    },
    {
        "name": "Suministros",
        "color": "#4d5d61",
        "subcategories": ["Electricidad", "Gas", "Internet", "Telefonia", "Telefonica Móvil", "Cable", "Agua", "Otros"],
    },
    {
        "name": "Suscripciones",
        "color": "#00a950",
        "subcategories": ["Google", "Netflix", "Mercado Libre", "Disney", "Spotify", "Youtube", "Otras"],
    },
    {
        "name": "Vida y Entretenimiento",
        "color": "#dd4b39",
        "subcategories": ["Restaurants", "Cafeterias", "Comida Rápida", "Bares", "Cines/Teatros", "Conciertos/Eventos", "Hobbies", "Vacaciones", "Alojamiento", "Otros"],
    },
    {
        "name": "Vivienda",
        "color": "#b30000",
        "subcategories": ["Alquileres", "Expensas", "Seguros", "ABL", "Limpieza", "Otros"],
    },
    {
        "name": "Créditos",
        "color": "#6c5ce7",
        "subcategories": ["Préstamos Personales", "Créditos Hipotecarios", "Tarjetas de Crédito"],
    },
]


def template_counts() -> tuple[int, int]:
    """(categories, subcategories) in the default template"""
    return (
        len(DEFAULT_CATEGORIES),
        sum(len(category["subcategories"]) for category in DEFAULT_CATEGORIES),
    )
