from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """Настройки веб-сервера"""
    host: str = Field("0.0.0.0", description="Адрес для привязки сервера")
    port: int = Field(8000, ge=1, le=65535, description="Порт сервера")
    reload: bool = Field(False, description="Auto-reload при изменении кода (для разработки)")


class SerialConfig(BaseModel):
    """Настройки последовательного порта (скорость и формат кадра фиксированы)"""
    port: str | None = Field(None, description="Явное имя порта или URL pyserial; None - автопоиск")
    # Идентификаторы Arduino Uno
    vendor_id: int = Field(0x2341, ge=0, le=0xFFFF, description="USB vendor id эталонной платы")
    product_id: int = Field(0x0043, ge=0, le=0xFFFF, description="USB product id эталонной платы")
    poll_interval_s: float = Field(1.0, gt=0.0, le=10.0, description="Период опроса списка портов")


class ControllerConfig(BaseModel):
    """Настройки геймпада"""
    enabled: bool = Field(True, description="Читать локальный геймпад через pygame")
    joystick_index: int = Field(0, ge=0, description="Индекс джойстика pygame")

    # Оси
    fb_axis: int = Field(1, ge=0, description="Ось вперёд/назад (левый стик, Y)")
    lr_axis: int = Field(2, ge=0, description="Ось влево/вправо (правый стик, X)")
    deadzone: float = Field(0.2, ge=0.0, lt=1.0, description="Мёртвая зона стиков")

    # D-pad
    dpad_speed: int = Field(200, ge=0, le=255, description="Фиксированная скорость для D-pad")
    dpad_buttons: dict[str, int] = Field(
        default_factory=lambda: {"up": 11, "down": 12, "left": 13, "right": 14},
        description="Кнопки D-pad (раскладка SDL для PS4), если D-pad не отдаётся как hat",
    )

    poll_interval_s: float = Field(0.01, gt=0.0, le=1.0, description="Период опроса событий pygame")


class Config(BaseModel):
    """Главная конфигурация приложения"""
    server: ServerConfig = ServerConfig()
    serial: SerialConfig = SerialConfig()
    controller: ControllerConfig = ControllerConfig()


# Глобальный экземпляр конфигурации
config = Config()
