"""Interactive page canvas for field placement, dragging and resizing."""

from __future__ import annotations

from PySide6.QtCore import QRectF, Qt, Signal
from PySide6.QtGui import QColor, QPainter, QPen, QPixmap
from PySide6.QtWidgets import QWidget

from formsign.editor.builder import TemplateBuilder
from formsign.editor.gestures import Corner
from formsign.model.field import FieldType, FormField
from formsign.model.geometry import Point, Rect, canonical_pixel_size
from formsign.model.page import Page

HANDLE_SIZE = 10.0


def _qrect(rect: Rect) -> QRectF:
    return QRectF(rect.x, rect.y, rect.width, rect.height)


class BuilderCanvas(QWidget):
    field_selection_changed = Signal(object)
    fields_changed = Signal()
    field_created = Signal()

    def __init__(self, builder: TemplateBuilder) -> None:
        super().__init__()
        self._builder = builder
        self._page: Page | None = None
        self._pixmap: QPixmap | None = None
        self._placement_type: FieldType | None = None
        self._selected: FormField | None = None

        self.setMouseTracking(True)
        self.setMinimumSize(200, 200)

    @property
    def selected_field(self) -> FormField | None:
        return self._selected

    def set_page(self, page: Page, background_png: bytes | None = None) -> None:
        self._builder.release_gesture()
        self._page = page
        self._pixmap = None
        if background_png:
            pixmap = QPixmap()
            if pixmap.loadFromData(background_png, "PNG"):
                self._pixmap = pixmap
        self._select(None)
        self._resize_to_page()
        self.update()

    def set_zoom(self, zoom: float) -> None:
        self._builder.release_gesture()
        self._builder.set_zoom(zoom)
        self._resize_to_page()
        self.update()

    def set_placement_type(self, field_type: FieldType | None) -> None:
        self._placement_type = field_type

    def delete_selected_field(self) -> bool:
        if self._page is None or self._selected is None:
            return False
        deleted = self._builder.delete_field(self._page.id, self._selected.id)
        self._select(None)
        if deleted:
            self.fields_changed.emit()
            self.update()
        return deleted

    def duplicate_selected_field(self) -> bool:
        if self._page is None or self._selected is None:
            return False
        duplicate = self._builder.duplicate_field(self._page.id, self._selected.id)
        if duplicate is None:
            return False
        self._select(duplicate)
        self.fields_changed.emit()
        self.update()
        return True

    def paintEvent(self, event) -> None:  # type: ignore[override]
        del event
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor("#e9eaee"))
        if self._page is None:
            return

        page_w, page_h = canonical_pixel_size(self._page.format)
        zoom = self._builder.zoom
        page_rect = QRectF(0, 0, page_w * zoom, page_h * zoom)
        if self._pixmap is not None:
            painter.drawPixmap(page_rect, self._pixmap, QRectF(self._pixmap.rect()))
        else:
            painter.fillRect(page_rect, QColor("#ffffff"))

        for placed in self._page.fields:
            rect_px = _qrect(self._builder.display_rect(placed))
            selected = placed is self._selected
            pen = QPen(QColor("#c62828") if selected else QColor("#1565c0"))
            pen.setWidth(2)
            painter.setPen(pen)
            painter.drawRect(rect_px)
            if selected:
                for handle in self._handle_rects(rect_px).values():
                    painter.fillRect(handle, QColor("#c62828"))

    def mousePressEvent(self, event) -> None:  # type: ignore[override]
        if self._page is None or event.button() != Qt.MouseButton.LeftButton:
            return
        pointer = Point(event.position().x(), event.position().y())

        if self._placement_type is not None:
            created = self._builder.drop_field(self._placement_type, self._page.id, pointer)
            if created is not None:
                self._select(created)
                self.fields_changed.emit()
                self.field_created.emit()
            self.update()
            return

        if self._selected is not None:
            rect_px = _qrect(self._builder.display_rect(self._selected))
            for corner, handle in self._handle_rects(rect_px).items():
                if handle.contains(event.position()):
                    self._builder.begin_resize(self._page.id, self._selected.id, corner, pointer)
                    return

        clicked = self._builder.field_at(self._page.id, pointer)
        self._select(clicked)
        if clicked is not None:
            self._builder.begin_drag(self._page.id, clicked.id, pointer)
        self.update()

    def mouseMoveEvent(self, event) -> None:  # type: ignore[override]
        gesture = self._builder.active_gesture
        if gesture is None:
            return
        if gesture.move(Point(event.position().x(), event.position().y())) is not None:
            self.fields_changed.emit()
            self.update()

    def mouseReleaseEvent(self, event) -> None:  # type: ignore[override]
        del event
        self._builder.release_gesture()

    def hideEvent(self, event) -> None:  # type: ignore[override]
        self._builder.release_gesture()
        super().hideEvent(event)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self._builder.close()
        super().closeEvent(event)

    def _select(self, placed: FormField | None) -> None:
        self._selected = placed
        self.field_selection_changed.emit(placed)

    def _resize_to_page(self) -> None:
        if self._page is None:
            return
        page_w, page_h = canonical_pixel_size(self._page.format)
        zoom = self._builder.zoom
        self.resize(int(round(page_w * zoom)), int(round(page_h * zoom)))

    def _handle_rects(self, field_rect: QRectF) -> dict[Corner, QRectF]:
        half = HANDLE_SIZE / 2.0
        corners = {
            Corner.TOP_LEFT: field_rect.topLeft(),
            Corner.TOP_RIGHT: field_rect.topRight(),
            Corner.BOTTOM_LEFT: field_rect.bottomLeft(),
            Corner.BOTTOM_RIGHT: field_rect.bottomRight(),
        }
        return {
            corner: QRectF(point.x() - half, point.y() - half, HANDLE_SIZE, HANDLE_SIZE)
            for corner, point in corners.items()
        }
