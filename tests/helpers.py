def action(text):
    return {"type": "action", "content": text}


def dialogue(character, *lines, parenthetical=None):
    elements = []
    if parenthetical:
        elements.append({"type": "parenthetical", "content": parenthetical})
    elements.extend({"type": "dialogue", "content": line} for line in lines)
    return {"type": "dialogue_block", "character": character, "elements": elements}
