from __future__ import annotations

import random
from typing import Optional, Sequence

from lingualeap.app.messages import translate
from lingualeap.contracts import Sentence, Severity, StudyMode
from lingualeap.playback.controller import PLAYBACK_SPEEDS
from lingualeap.study.chunks import MAX_CHUNK_SIZE, MIN_CHUNK_SIZE
from lingualeap.study.games import FillInTheBlank, FlashcardDeck, SentenceBuilder

try:
    from PyQt6 import QtCore, QtWidgets

    _PYQT_IMPORT_ERROR: ModuleNotFoundError | None = None
except ModuleNotFoundError as e:  # pragma: no cover - import guard path
    QtCore = None  # type: ignore[assignment]
    QtWidgets = None  # type: ignore[assignment]
    _PYQT_IMPORT_ERROR = e


_LABELS = {
    "en": {
        "study": "Study",
        "flashcards": "Flashcards",
        "builder": "Sentence Builder",
        "fill": "Fill in the Blank",
        "grammar": "Grammar",
        "prev": "Previous",
        "next": "Next",
        "play": "Play",
        "stop": "Stop",
        "play_all": "Play All",
        "reveal": "Reveal",
        "loop": "Loop",
        "speed": "Speed",
        "mode": "Mode",
        "chunk_size": "Sentences per chunk",
        "chunk": "Chunk",
        "timer": "Start Timer",
        "minutes": "Practice minutes",
        "check": "Check",
        "reset": "Reset",
        "learned": "Mark Learned",
        "explain": "Explain Current Sentence",
    },
    "sq": {
        "study": "Studim",
        "flashcards": "Kartela",
        "builder": "Ndërto Fjalinë",
        "fill": "Plotëso Boshllëkun",
        "grammar": "Gramatika",
        "prev": "Mbrapa",
        "next": "Para",
        "play": "Luaj",
        "stop": "Ndalo",
        "play_all": "Luaj të Gjitha",
        "reveal": "Shfaq",
        "loop": "Përsërit",
        "speed": "Shpejtësia",
        "mode": "Mënyra",
        "chunk_size": "Fjali për pjesë",
        "chunk": "Pjesa",
        "timer": "Nis Kohëmatësin",
        "minutes": "Minuta praktike",
        "check": "Kontrollo",
        "reset": "Rinis",
        "learned": "Shëno si të Mësuar",
        "explain": "Shpjego Fjalinë",
    },
}


if QtWidgets is not None:
    class MainWindow(QtWidgets.QMainWindow):
        play_pause_requested = QtCore.pyqtSignal()
        prev_requested = QtCore.pyqtSignal()
        next_requested = QtCore.pyqtSignal()
        play_all_requested = QtCore.pyqtSignal()
        reveal_requested = QtCore.pyqtSignal()
        loop_toggled = QtCore.pyqtSignal(bool)
        speed_changed = QtCore.pyqtSignal(float)
        study_mode_changed = QtCore.pyqtSignal(str)
        chunk_size_changed = QtCore.pyqtSignal(int)
        chunk_selected = QtCore.pyqtSignal(int)
        timer_start_requested = QtCore.pyqtSignal()
        timer_minutes_changed = QtCore.pyqtSignal(int)
        explain_requested = QtCore.pyqtSignal(str)

        def __init__(self, ui_language: str = "en") -> None:
            super().__init__()
            self.setWindowTitle("LinguaLeap")
            self.resize(860, 560)
            self._ui_language = ui_language if ui_language in _LABELS else "en"
            self._syncing = False
            self._deck: Optional[FlashcardDeck] = None
            self._builder: Optional[SentenceBuilder] = None
            self._fill: Optional[FillInTheBlank] = None
            self._sentence: Optional[Sentence] = None

            root = QtWidgets.QWidget(self)
            self.setCentralWidget(root)
            lay = QtWidgets.QVBoxLayout(root)
            lay.setContentsMargins(22, 20, 22, 20)
            lay.setSpacing(12)

            title = QtWidgets.QLabel("LinguaLeap", root)
            title.setObjectName("title")
            lay.addWidget(title)

            self.status_label = QtWidgets.QLabel("", root)
            self.status_label.setObjectName("status")
            self.status_label.setWordWrap(True)
            lay.addWidget(self.status_label)

            self.tabs = QtWidgets.QTabWidget(root)
            lay.addWidget(self.tabs, 1)
            self.tabs.addTab(self._build_study_tab(), self._t("study"))
            self.tabs.addTab(self._build_flashcard_tab(), self._t("flashcards"))
            self.tabs.addTab(self._build_builder_tab(), self._t("builder"))
            self.tabs.addTab(self._build_fill_tab(), self._t("fill"))
            self.tabs.addTab(self._build_grammar_tab(), self._t("grammar"))

            self.setStyleSheet(
                """
                QMainWindow { background: #121416; color: #e8ecef; }
                QLabel#title { font-size: 30px; font-weight: 700; letter-spacing: 0.3px; }
                QLabel#status { color: #a7b0b8; font-size: 13px; }
                QLabel#status[severity="error"] { color: #ff8a80; }
                QLabel#sentence { font-size: 24px; font-weight: 600; }
                QLabel#translation { color: #b8c1c8; font-size: 16px; }
                QPushButton {
                    background: #22272d;
                    border: 1px solid #313840;
                    border-radius: 10px;
                    color: #e7edf3;
                    padding: 8px 14px;
                    font-size: 13px;
                    font-weight: 600;
                }
                QPushButton:hover { background: #2a3037; }
                QPushButton#primary {
                    background: #c8f25f;
                    color: #172005;
                    border-color: #c8f25f;
                }
                """
            )

        def _t(self, key: str) -> str:
            return _LABELS[self._ui_language].get(key, key)

        def _build_study_tab(self) -> QtWidgets.QWidget:
            tab = QtWidgets.QWidget()
            lay = QtWidgets.QVBoxLayout(tab)

            self.progress_label = QtWidgets.QLabel("", tab)
            lay.addWidget(self.progress_label)
            self.sentence_label = QtWidgets.QLabel("", tab)
            self.sentence_label.setObjectName("sentence")
            self.sentence_label.setWordWrap(True)
            lay.addWidget(self.sentence_label)
            self.translation_label = QtWidgets.QLabel("", tab)
            self.translation_label.setObjectName("translation")
            self.translation_label.setWordWrap(True)
            lay.addWidget(self.translation_label)

            row = QtWidgets.QHBoxLayout()
            self.btn_prev = QtWidgets.QPushButton(self._t("prev"), tab)
            self.btn_play = QtWidgets.QPushButton(self._t("play"), tab)
            self.btn_play.setObjectName("primary")
            self.btn_next = QtWidgets.QPushButton(self._t("next"), tab)
            self.btn_play_all = QtWidgets.QPushButton(self._t("play_all"), tab)
            self.btn_reveal = QtWidgets.QPushButton(self._t("reveal"), tab)
            self.loop_check = QtWidgets.QCheckBox(self._t("loop"), tab)
            for w in (self.btn_prev, self.btn_play, self.btn_next, self.btn_play_all, self.btn_reveal, self.loop_check):
                row.addWidget(w)
            row.addStretch(1)
            lay.addLayout(row)

            form = QtWidgets.QFormLayout()
            self.speed_combo = QtWidgets.QComboBox(tab)
            for speed in PLAYBACK_SPEEDS:
                self.speed_combo.addItem(f"{speed:g}x", speed)
            form.addRow(self._t("speed"), self.speed_combo)
            self.mode_combo = QtWidgets.QComboBox(tab)
            self.mode_combo.addItem("Read & Listen", StudyMode.READ_LISTEN.value)
            self.mode_combo.addItem("Active Recall", StudyMode.ACTIVE_RECALL.value)
            form.addRow(self._t("mode"), self.mode_combo)
            self.chunk_size_spin = QtWidgets.QSpinBox(tab)
            self.chunk_size_spin.setRange(MIN_CHUNK_SIZE, MAX_CHUNK_SIZE)
            form.addRow(self._t("chunk_size"), self.chunk_size_spin)
            self.chunk_spin = QtWidgets.QSpinBox(tab)
            self.chunk_spin.setRange(1, 1)
            form.addRow(self._t("chunk"), self.chunk_spin)
            self.minutes_spin = QtWidgets.QSpinBox(tab)
            self.minutes_spin.setRange(1, 180)
            form.addRow(self._t("minutes"), self.minutes_spin)
            lay.addLayout(form)

            timer_row = QtWidgets.QHBoxLayout()
            self.btn_timer = QtWidgets.QPushButton(self._t("timer"), tab)
            self.timer_label = QtWidgets.QLabel("00:00", tab)
            timer_row.addWidget(self.btn_timer)
            timer_row.addWidget(self.timer_label)
            timer_row.addStretch(1)
            lay.addLayout(timer_row)
            lay.addStretch(1)

            self.btn_prev.clicked.connect(self.prev_requested.emit)
            self.btn_next.clicked.connect(self.next_requested.emit)
            self.btn_play.clicked.connect(self.play_pause_requested.emit)
            self.btn_play_all.clicked.connect(self.play_all_requested.emit)
            self.btn_reveal.clicked.connect(self.reveal_requested.emit)
            self.btn_timer.clicked.connect(self.timer_start_requested.emit)
            self.loop_check.toggled.connect(lambda on: self._emit_unless_syncing(self.loop_toggled, bool(on)))
            self.speed_combo.currentIndexChanged.connect(
                lambda _: self._emit_unless_syncing(self.speed_changed, float(self.speed_combo.currentData()))
            )
            self.mode_combo.currentIndexChanged.connect(
                lambda _: self._emit_unless_syncing(self.study_mode_changed, str(self.mode_combo.currentData()))
            )
            self.chunk_size_spin.editingFinished.connect(
                lambda: self._emit_unless_syncing(self.chunk_size_changed, self.chunk_size_spin.value())
            )
            self.chunk_spin.editingFinished.connect(
                lambda: self._emit_unless_syncing(self.chunk_selected, self.chunk_spin.value() - 1)
            )
            self.minutes_spin.valueChanged.connect(
                lambda v: self._emit_unless_syncing(self.timer_minutes_changed, int(v))
            )
            return tab

        def _build_flashcard_tab(self) -> QtWidgets.QWidget:
            tab = QtWidgets.QWidget()
            lay = QtWidgets.QVBoxLayout(tab)
            self.card_front = QtWidgets.QLabel("", tab)
            self.card_front.setObjectName("sentence")
            self.card_back = QtWidgets.QLabel("", tab)
            self.card_back.setObjectName("translation")
            self.card_back.setWordWrap(True)
            lay.addWidget(self.card_front)
            lay.addWidget(self.card_back)
            row = QtWidgets.QHBoxLayout()
            btn_prev = QtWidgets.QPushButton(self._t("prev"), tab)
            btn_reveal = QtWidgets.QPushButton(self._t("reveal"), tab)
            btn_next = QtWidgets.QPushButton(self._t("next"), tab)
            btn_learned = QtWidgets.QPushButton(self._t("learned"), tab)
            for w in (btn_prev, btn_reveal, btn_next, btn_learned):
                row.addWidget(w)
            row.addStretch(1)
            lay.addLayout(row)
            lay.addStretch(1)
            btn_prev.clicked.connect(lambda: self._deck_action("prev"))
            btn_next.clicked.connect(lambda: self._deck_action("next"))
            btn_reveal.clicked.connect(lambda: self._deck_action("reveal"))
            btn_learned.clicked.connect(lambda: self._deck_action("mark_learned"))
            return tab

        def _build_builder_tab(self) -> QtWidgets.QWidget:
            tab = QtWidgets.QWidget()
            lay = QtWidgets.QVBoxLayout(tab)
            self.builder_attempt = QtWidgets.QLabel("", tab)
            self.builder_attempt.setObjectName("sentence")
            self.builder_attempt.setWordWrap(True)
            lay.addWidget(self.builder_attempt)
            self.builder_pool = QtWidgets.QListWidget(tab)
            self.builder_pool.setFlow(QtWidgets.QListView.Flow.LeftToRight)
            self.builder_pool.setWrapping(True)
            lay.addWidget(self.builder_pool)
            row = QtWidgets.QHBoxLayout()
            btn_undo = QtWidgets.QPushButton("⟲", tab)
            btn_check = QtWidgets.QPushButton(self._t("check"), tab)
            btn_reset = QtWidgets.QPushButton(self._t("reset"), tab)
            for w in (btn_undo, btn_check, btn_reset):
                row.addWidget(w)
            row.addStretch(1)
            lay.addLayout(row)
            self.builder_feedback = QtWidgets.QLabel("", tab)
            self.builder_feedback.setWordWrap(True)
            lay.addWidget(self.builder_feedback)
            self.builder_pool.itemClicked.connect(self._on_builder_pick)
            btn_undo.clicked.connect(self._on_builder_undo)
            btn_check.clicked.connect(self._on_builder_check)
            btn_reset.clicked.connect(self._on_builder_reset)
            return tab

        def _build_fill_tab(self) -> QtWidgets.QWidget:
            tab = QtWidgets.QWidget()
            lay = QtWidgets.QVBoxLayout(tab)
            self.fill_prompt = QtWidgets.QLabel("", tab)
            self.fill_prompt.setObjectName("sentence")
            self.fill_prompt.setWordWrap(True)
            lay.addWidget(self.fill_prompt)
            self.fill_input = QtWidgets.QLineEdit(tab)
            lay.addWidget(self.fill_input)
            btn_check = QtWidgets.QPushButton(self._t("check"), tab)
            lay.addWidget(btn_check, 0, QtCore.Qt.AlignmentFlag.AlignLeft)
            self.fill_feedback = QtWidgets.QLabel("", tab)
            lay.addWidget(self.fill_feedback)
            lay.addStretch(1)
            btn_check.clicked.connect(self._on_fill_check)
            self.fill_input.returnPressed.connect(self._on_fill_check)
            self.fill_input.textEdited.connect(lambda _: self.fill_feedback.setText(""))
            return tab

        def _build_grammar_tab(self) -> QtWidgets.QWidget:
            tab = QtWidgets.QWidget()
            lay = QtWidgets.QVBoxLayout(tab)
            self.btn_explain = QtWidgets.QPushButton(self._t("explain"), tab)
            lay.addWidget(self.btn_explain, 0, QtCore.Qt.AlignmentFlag.AlignLeft)
            self.grammar_text = QtWidgets.QTextBrowser(tab)
            lay.addWidget(self.grammar_text, 1)
            self.btn_explain.clicked.connect(self._on_explain_clicked)
            return tab

        def _emit_unless_syncing(self, signal, value) -> None:
            if not self._syncing:
                signal.emit(value)

        # --- session -> widgets ---

        def render_session(
            self,
            *,
            sentence: Optional[Sentence],
            index: int,
            chunk_len: int,
            revealed: bool,
            busy: bool,
            looping: bool,
            speed: float,
            study_mode: StudyMode,
            chunk_size: int,
            selected_chunk: int,
            num_chunks: int,
        ) -> None:
            self._syncing = True
            try:
                if sentence is None:
                    self.progress_label.setText("")
                    self.sentence_label.setText("")
                    self.translation_label.setText("")
                else:
                    self.progress_label.setText(f"{index + 1} / {chunk_len}")
                    self.sentence_label.setText(sentence.source_text)
                    self.translation_label.setText(sentence.target_text if revealed else "…")
                self.btn_play.setText(self._t("stop") if busy else self._t("play"))
                self.btn_reveal.setEnabled(not revealed)
                self.loop_check.setChecked(looping)
                idx = self.speed_combo.findData(speed)
                if idx >= 0:
                    self.speed_combo.setCurrentIndex(idx)
                idx = self.mode_combo.findData(study_mode.value)
                if idx >= 0:
                    self.mode_combo.setCurrentIndex(idx)
                self.chunk_size_spin.setValue(chunk_size)
                self.chunk_spin.setRange(1, max(1, num_chunks))
                self.chunk_spin.setValue(selected_chunk + 1)
            finally:
                self._syncing = False
            if sentence is not self._sentence:
                self._sentence = sentence
                self._builder = SentenceBuilder(sentence, random.Random())
                self._fill = FillInTheBlank(sentence)
                self._refresh_builder()
                self._refresh_fill()

        def set_chunk(self, sentences: Sequence[Sentence]) -> None:
            self._deck = FlashcardDeck(sentences)
            self._refresh_deck()

        def set_timer_text(self, text: str) -> None:
            self.timer_label.setText(text)

        def set_minutes(self, minutes: int) -> None:
            self._syncing = True
            try:
                self.minutes_spin.setValue(minutes)
            finally:
                self._syncing = False

        def show_notification(self, message: str, severity: Severity) -> None:
            self.status_label.setText(message)
            self.status_label.setProperty("severity", severity.value)
            self.status_label.style().unpolish(self.status_label)
            self.status_label.style().polish(self.status_label)

        def show_grammar(self, text: str) -> None:
            self.btn_explain.setEnabled(True)
            self.grammar_text.setPlainText(text)

        def ask_retry_load(self, detail: str, hint: str) -> bool:
            box = QtWidgets.QMessageBox(self)
            box.setIcon(QtWidgets.QMessageBox.Icon.Critical)
            box.setWindowTitle("LinguaLeap")
            box.setText(translate("error_loading_sentence_data", self._ui_language, error=detail))
            box.setInformativeText(hint)
            box.setStandardButtons(
                QtWidgets.QMessageBox.StandardButton.Retry | QtWidgets.QMessageBox.StandardButton.Close
            )
            box.exec()
            return box.clickedButton() is box.button(QtWidgets.QMessageBox.StandardButton.Retry)

        # --- games ---

        def _deck_action(self, action: str) -> None:
            if self._deck is None:
                return
            getattr(self._deck, action)()
            self._refresh_deck()

        def _refresh_deck(self) -> None:
            card = self._deck.current if self._deck is not None else None
            if card is None:
                self.card_front.setText("")
                self.card_back.setText("")
                return
            mark = " ✓" if card.verb_source in self._deck.learned else ""
            self.card_front.setText(card.verb_source + mark)
            self.card_back.setText(f"{card.verb_target}\n{card.example}" if self._deck.is_revealed else "")

        def _refresh_builder(self) -> None:
            self.builder_pool.clear()
            if self._builder is None:
                return
            for token in self._builder.available:
                item = QtWidgets.QListWidgetItem(token.text)
                item.setData(QtCore.Qt.ItemDataRole.UserRole, token.id)
                self.builder_pool.addItem(item)
            self.builder_attempt.setText(self._builder.attempt)
            self.builder_feedback.setText("")

        def _on_builder_pick(self, item) -> None:
            if self._builder is None:
                return
            self._builder.pick(str(item.data(QtCore.Qt.ItemDataRole.UserRole)))
            self._refresh_builder()

        def _on_builder_undo(self) -> None:
            if self._builder is None or not self._builder.constructed:
                return
            self._builder.unpick(self._builder.constructed[-1].id)
            self._refresh_builder()

        def _on_builder_check(self) -> None:
            if self._builder is None:
                return
            ok = self._builder.check()
            self.builder_feedback.setText("✓" if ok else f"✗ {self._builder.target}")

        def _on_builder_reset(self) -> None:
            if self._builder is not None:
                self._builder.reset()
            self._refresh_builder()

        def _refresh_fill(self) -> None:
            self.fill_input.clear()
            self.fill_feedback.setText("")
            if self._fill is None or not self._fill.available:
                self.fill_prompt.setText("-")
                self.fill_input.setEnabled(False)
                return
            self.fill_prompt.setText(self._fill.blanked)
            self.fill_input.setEnabled(True)

        def _on_fill_check(self) -> None:
            if self._fill is None or not self._fill.available:
                return
            ok = self._fill.check(self.fill_input.text())
            self.fill_feedback.setText("✓" if ok else f"✗ {self._fill.answer}")

        def _on_explain_clicked(self) -> None:
            if self._sentence is None:
                return
            self.btn_explain.setEnabled(False)
            self.grammar_text.setPlainText("…")
            self.explain_requested.emit(self._sentence.source_text)
else:
    class MainWindow:
        def __init__(self, ui_language: str = "en") -> None:
            raise ModuleNotFoundError(
                "PyQt6 is required for MainWindow. Install with: python -m pip install PyQt6"
            ) from _PYQT_IMPORT_ERROR
